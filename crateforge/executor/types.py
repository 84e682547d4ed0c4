from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from crateforge.config.types import WorkspaceConfig
from crateforge.workspace.types import ProjectUnit


class Operation(Enum):
    INSTALL = "install"
    BUILD = "build"
    TEST = "test"

    @property
    def needs_manifest(self) -> bool:
        return self is not Operation.INSTALL

    @property
    def command_name(self) -> str:
        return f"{self.value}-all"

    @classmethod
    def from_command(cls, name: str) -> Operation:
        for op in cls:
            if op.command_name == name:
                return op
        raise KeyError(name)


class Attempt(Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class FailureKind(Enum):
    UNIT_BUILD_FAILED = "UnitBuildFailed"
    UNIT_TEST_FAILED = "UnitTestFailed"
    UNIT_INSTALL_FAILED = "UnitInstallFailed"
    UNIT_INSTALL_FALLBACK_FAILED = "UnitInstallFallbackFailed"


@dataclass(frozen=True)
class FallbackPolicy:
    primary: tuple[str, ...]
    extra: tuple[str, ...]

    @classmethod
    def from_config(cls, config: WorkspaceConfig) -> FallbackPolicy:
        extra: tuple[str, ...] = ()
        if config.fallback_features:
            extra = ("--features", ",".join(config.fallback_features))
        return cls(("--bins", *config.verbosity), extra)

    @property
    def enabled(self) -> bool:
        return len(self.extra) > 0

    @property
    def secondary(self) -> tuple[str, ...]:
        return self.primary + self.extra

    def arguments(self, path: str, attempt: Attempt) -> list[str]:
        base = self.secondary if attempt is Attempt.FALLBACK else self.primary
        return [*base, "--path", path]


@dataclass(frozen=True)
class ExecutionResult:
    unit: ProjectUnit
    operation: Operation
    attempt: Attempt
    argv: tuple[str, ...]
    returncode: int
    output: str
    duration_s: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def failure(self) -> FailureKind | None:
        if self.ok:
            return None
        match self.operation, self.attempt:
            case Operation.BUILD, _:
                return FailureKind.UNIT_BUILD_FAILED
            case Operation.TEST, _:
                return FailureKind.UNIT_TEST_FAILED
            case Operation.INSTALL, Attempt.PRIMARY:
                return FailureKind.UNIT_INSTALL_FAILED
            case _:
                return FailureKind.UNIT_INSTALL_FALLBACK_FAILED


@dataclass(frozen=True)
class RunSummary:
    operation: Operation
    units: tuple[ProjectUnit, ...]
    skipped: tuple[ProjectUnit, ...]
    primary: tuple[ExecutionResult, ...]
    fallback: tuple[ExecutionResult, ...]
    fallback_triggered: bool
    strict_manifests: bool

    @property
    def failed(self) -> list[ExecutionResult]:
        return [result for result in self.primary if not result.ok]

    @property
    def ok(self) -> bool:
        if self.failed:
            return False
        if self.strict_manifests and self.skipped:
            return False
        return True

    @property
    def exit_code(self) -> int:
        if self.ok:
            return 0
        failed = self.failed
        if failed and 0 < failed[0].returncode < 256:
            return failed[0].returncode
        return 1

    def results(self) -> list[ExecutionResult]:
        return [*self.primary, *self.fallback]
