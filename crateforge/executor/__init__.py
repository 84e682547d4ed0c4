from .orchestrator import Orchestrator
from .runner import TaskRunner
from .types import (
    Attempt,
    ExecutionResult,
    FailureKind,
    FallbackPolicy,
    Operation,
    RunSummary,
)

__all__ = [
    "Orchestrator",
    "TaskRunner",
    "Attempt",
    "ExecutionResult",
    "FailureKind",
    "FallbackPolicy",
    "Operation",
    "RunSummary",
]
