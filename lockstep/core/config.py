"""Typed configuration loading and access.

A project may carry a `lockstep.toml` at its root:

    [release]
    manifest = "buildpack.toml"
    changelog = "CHANGELOG.md"
    table = "buildpack"
    ignore = ["target"]
    date_format = "%Y-%m-%d"

Every key is optional; missing keys fall back to the defaults below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "Config",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "lockstep.toml"

DEFAULT_MANIFEST = "buildpack.toml"
DEFAULT_CHANGELOG = "CHANGELOG.md"
DEFAULT_TABLE = "buildpack"
DEFAULT_IGNORE = ("target",)
DEFAULT_DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Where packages live and how their files are shaped."""

    manifest: str = DEFAULT_MANIFEST
    changelog: str = DEFAULT_CHANGELOG
    # Table that holds the package `id` and `version` keys.
    table: str = DEFAULT_TABLE
    ignore: tuple[str, ...] = DEFAULT_IGNORE
    date_format: str = DEFAULT_DATE_FORMAT


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        release: StrDict = get_table(data, "release") or {}
        ignore = get_str_list(release, "ignore")

        return cls(
            release=ReleaseConfig(
                manifest=get_str(release, "manifest") or DEFAULT_MANIFEST,
                changelog=get_str(release, "changelog") or DEFAULT_CHANGELOG,
                table=get_str(release, "table") or DEFAULT_TABLE,
                ignore=tuple(ignore) if ignore is not None else DEFAULT_IGNORE,
                date_format=get_str(release, "date_format") or DEFAULT_DATE_FORMAT,
            )
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to lockstep.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or the default config if the file doesn't exist.

    A file that exists but does not parse is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
