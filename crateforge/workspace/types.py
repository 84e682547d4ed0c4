from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectUnit:
    path: Path
    manifest: Path
    has_manifest: bool

    @property
    def name(self) -> str:
        return self.path.name


class WorkspaceError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class WorkspaceUnreadable(WorkspaceError):
    def __init__(self, root: Path, reason: str):
        super().__init__(f"Workspace unreadable: {root}: {reason}")
        self.root = root
        self.reason = reason
