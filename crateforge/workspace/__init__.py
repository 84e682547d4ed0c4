from .enumerator import Workspace
from .types import ProjectUnit, WorkspaceError, WorkspaceUnreadable

__all__ = ["Workspace", "ProjectUnit", "WorkspaceError", "WorkspaceUnreadable"]
