import json
import logging
import shlex
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .types import (
    DEFAULT_CONFIG_NAMES,
    ConfigError,
    UnsupportedConfigFormatError,
    WorkspaceConfig,
)

logger = logging.getLogger(__name__)


def load_config(path: str | Path | None = None, *, root: str | Path = ".") -> WorkspaceConfig:
    """Load the workspace config.

    An explicit ``path`` must exist. Without one, the first default config file
    found in ``root`` is used, and built-in defaults apply when there is none.
    """
    if path is None:
        found = find_config(root)
        if found is None:
            logger.debug(f"No config file in {root}, using defaults")
            return WorkspaceConfig()
        path = found

    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Config path is not a file: {pure_path}")

    logger.debug(f"Loading config from {pure_path}")
    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    return _build_workspace_config(raw_file)


def find_config(root: str | Path) -> Path | None:
    base = Path(root).expanduser()
    for name in DEFAULT_CONFIG_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    match fmt:
        case "yaml":
            return _parse_yaml(path)
        case "toml":
            return _parse_toml(path)
        case "json":
            return _parse_json(path)
        case _:
            raise AssertionError("Unreachable")


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"{path}: cannot read config file") from exc


def _parse_yaml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = yaml.safe_load(_read(path))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: YAML parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _parse_toml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = tomllib.loads(_read(path))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: invalid TOML") from exc

    return raw_file


def _parse_json(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = json.loads(_read(path))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: JSON parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_workspace_config(raw: Mapping[str, Any]) -> WorkspaceConfig:
    keys = {
        "toolchain",
        "manifest",
        "verbosity",
        "fallback_features",
        "env",
        "strict_manifests",
    }
    config = WorkspaceConfig()

    for key in raw.keys():
        if key not in keys:
            raise ConfigError(f"Can't process: {key}")

    if "toolchain" in raw:
        config.toolchain = _toolchain(raw["toolchain"])

    if "manifest" in raw:
        manifest = raw["manifest"]
        if not isinstance(manifest, str):
            raise ConfigError("The manifest should be a string")

        manifest = manifest.strip()

        if len(manifest) < 1:
            raise ConfigError("Manifest name missing")

        if manifest in (".", "..") or Path(manifest).name != manifest:
            raise ConfigError(f"The manifest should be a file name, got {manifest}")

        config.manifest = manifest

    if "verbosity" in raw:
        config.verbosity = _string_list("verbosity", raw["verbosity"])

    if "fallback_features" in raw:
        config.fallback_features = _string_list(
            "fallback_features", raw["fallback_features"]
        )

    if "env" in raw:
        config.env = _env(raw["env"])

    if "strict_manifests" in raw:
        if not isinstance(raw["strict_manifests"], bool):
            raise ConfigError("strict_manifests should be a boolean")

        config.strict_manifests = raw["strict_manifests"]

    return config


def _toolchain(value: Any) -> list[str]:
    if isinstance(value, str):
        parts = shlex.split(value)
    elif isinstance(value, list):
        parts = _string_list("toolchain", value)
    else:
        raise ConfigError("The toolchain should be a string or a list of strings")

    if len(parts) < 1:
        raise ConfigError("Toolchain command missing")

    return parts


def _string_list(name: str, value: Any) -> list[str]:
    items = []

    if not isinstance(value, list):
        raise ConfigError(f"{name} should be a list.")

    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{name}: {item} should be a string")

        item_norm = item.strip()

        if len(item_norm) < 1:
            raise ConfigError(f"{name}: an entry is empty")

        items.append(item_norm)

    return items


def _env(value: Any) -> dict[str, str]:
    env = {}

    if not isinstance(value, Mapping):
        raise ConfigError("Env should be a mapping")

    for key, item in value.items():
        if not isinstance(key, str):
            raise ConfigError(f"env: {key} should be a string")

        if len(key.strip()) < 1:
            raise ConfigError("env: A key can't be empty")

        if not isinstance(item, str):
            raise ConfigError(f"env: {item} should be a string")

        env[key.strip()] = item

    return env
