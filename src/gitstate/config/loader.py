"""Load and merge configuration from .gitstate.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from gitstate.config.schema import OUTPUT_FORMATS, GitConfig, GitStateConfig, OutputConfig

CONFIG_FILENAME = ".gitstate.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: GitStateConfig) -> None:
    """Apply GITSTATE_* environment variable overrides."""
    if val := os.environ.get("GITSTATE_BASE_REV"):
        cfg.git.base_rev = val.strip()
    if val := os.environ.get("GITSTATE_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("GITSTATE_GIT_TIMEOUT"):
        try:
            timeout = int(val)
        except ValueError:
            pass
        else:
            if timeout > 0:
                cfg.git.timeout = timeout


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.get(section, {}).items() if k in valid_fields}
    return cls(**filtered)


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> GitStateConfig:
    """Load, validate, and return a GitStateConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = GitStateConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = GitStateConfig(
            version=raw.get("version", "1.0"),
            git=_build_section(raw, GitConfig, "git"),
            output=_build_section(raw, OutputConfig, "output"),
        )
        if cfg.output.format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Invalid output format {cfg.output.format!r} in {config_path}"
            )

    _merge_env_overrides(cfg)
    return cfg
