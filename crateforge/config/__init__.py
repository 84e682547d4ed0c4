from .loader import find_config, load_config
from .types import ConfigError, UnsupportedConfigFormatError, WorkspaceConfig

__all__ = [
    "find_config",
    "load_config",
    "WorkspaceConfig",
    "ConfigError",
    "UnsupportedConfigFormatError",
]
