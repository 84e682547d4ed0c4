import logging
from collections.abc import Callable, Sequence

from crateforge.workspace import ProjectUnit, Workspace

from .runner import TaskRunner
from .types import Attempt, ExecutionResult, Operation, RunSummary

logger = logging.getLogger(__name__)

StartCallback = Callable[[Operation, ProjectUnit, Attempt], None]
ResultCallback = Callable[[ExecutionResult], None]


class Orchestrator:
    def __init__(
        self, workspace: Workspace, runner: TaskRunner, *, strict_manifests: bool = True
    ):
        self.workspace = workspace
        self.runner = runner
        self.strict_manifests = strict_manifests

    def run(
        self,
        operation: Operation,
        *,
        on_start: StartCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> RunSummary:
        """Run ``operation`` over every unit of the workspace.

        The unit list is taken once up front, so an unreadable workspace fails
        before the toolchain is invoked at all. For installs, a primary phase
        with any failure is followed by a fallback pass over all units; the
        fallback results are recorded but never change the outcome.

        ``on_start`` fires before each toolchain call and ``on_result`` right
        after it, in run order.
        """
        units, skipped = self.workspace.partition(
            require_manifest=operation.needs_manifest
        )

        for unit in skipped:
            logger.info(f"{unit.name}: skipped, no {unit.manifest.name}")

        logger.info(f"{operation.command_name}: {len(units)} unit(s)")
        primary = self._run_phase(
            operation, units, Attempt.PRIMARY, on_start, on_result
        )

        fallback: list[ExecutionResult] = []
        triggered = False
        if (
            operation is Operation.INSTALL
            and self.runner.policy.enabled
            and any(not result.ok for result in primary)
        ):
            triggered = True
            logger.info("Primary install phase failed, running fallback install")
            fallback = self._run_phase(
                operation, units, Attempt.FALLBACK, on_start, on_result
            )

        return RunSummary(
            operation=operation,
            units=units,
            skipped=skipped,
            primary=tuple(primary),
            fallback=tuple(fallback),
            fallback_triggered=triggered,
            strict_manifests=self.strict_manifests,
        )

    def install_all(self, **callbacks) -> RunSummary:
        return self.run(Operation.INSTALL, **callbacks)

    def build_all(self, **callbacks) -> RunSummary:
        return self.run(Operation.BUILD, **callbacks)

    def test_all(self, **callbacks) -> RunSummary:
        return self.run(Operation.TEST, **callbacks)

    def _run_phase(
        self,
        operation: Operation,
        units: Sequence[ProjectUnit],
        attempt: Attempt,
        on_start: StartCallback | None,
        on_result: ResultCallback | None,
    ) -> list[ExecutionResult]:
        results: list[ExecutionResult] = []
        for unit in units:
            if on_start is not None:
                on_start(operation, unit, attempt)
            result = self.runner.run(operation, unit, attempt)
            results.append(result)
            if on_result is not None:
                on_result(result)
        return results
