from dataclasses import dataclass, field

DEFAULT_TOOLCHAIN = ("cargo",)
DEFAULT_MANIFEST = "Cargo.toml"
DEFAULT_VERBOSITY = ("-vv",)
DEFAULT_FALLBACK_FEATURES = ("log",)
DEFAULT_CONFIG_NAMES = (
    "crateforge.toml",
    "crateforge.yaml",
    "crateforge.yml",
    "crateforge.json",
)


@dataclass
class WorkspaceConfig:
    toolchain: list[str] = field(default_factory=lambda: list(DEFAULT_TOOLCHAIN))
    manifest: str = DEFAULT_MANIFEST
    verbosity: list[str] = field(default_factory=lambda: list(DEFAULT_VERBOSITY))
    fallback_features: list[str] = field(
        default_factory=lambda: list(DEFAULT_FALLBACK_FEATURES)
    )
    env: dict[str, str] = field(default_factory=dict)
    strict_manifests: bool = True


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
