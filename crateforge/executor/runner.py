import logging
import os
import subprocess
import time
from pathlib import Path

from crateforge.config import WorkspaceConfig
from crateforge.workspace import ProjectUnit

from .types import Attempt, ExecutionResult, FallbackPolicy, Operation

logger = logging.getLogger(__name__)

# Exit status a shell reports when the command cannot be found or started.
COMMAND_NOT_FOUND = 127


class TaskRunner:
    def __init__(self, config: WorkspaceConfig, cwd: str | Path | None = None):
        self.config = config
        self.cwd = cwd
        self.policy = FallbackPolicy.from_config(config)

    def command_for(
        self, operation: Operation, unit: ProjectUnit, attempt: Attempt = Attempt.PRIMARY
    ) -> list[str]:
        if attempt is Attempt.FALLBACK and operation is not Operation.INSTALL:
            raise ValueError(f"{operation.value} has no fallback attempt")

        argv = [*self.config.toolchain, operation.value]
        match operation:
            case Operation.BUILD | Operation.TEST:
                argv += [*self.config.verbosity, "--manifest-path", str(unit.manifest)]
            case Operation.INSTALL:
                argv += self.policy.arguments(str(unit.path), attempt)
        return argv

    def run(
        self, operation: Operation, unit: ProjectUnit, attempt: Attempt = Attempt.PRIMARY
    ) -> ExecutionResult:
        argv = self.command_for(operation, unit, attempt)
        logger.debug(f"Running: {' '.join(argv)}")

        start = time.monotonic()
        try:
            result = subprocess.run(
                argv,
                cwd=self.cwd,
                env={**os.environ, **self.config.env},
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
            returncode, output = result.returncode, result.stdout
        except OSError as exc:
            returncode, output = COMMAND_NOT_FOUND, f"{argv[0]}: {exc}\n"
        duration = time.monotonic() - start

        if returncode != 0:
            logger.warning(
                f"{operation.value} ({attempt.value}) failed for {unit.name} "
                f"with exit code {returncode}"
            )

        return ExecutionResult(
            unit, operation, attempt, tuple(argv), returncode, output, duration
        )
