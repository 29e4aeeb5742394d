"""Configuration loading: TOML parsing, deep merging, and applying to the context."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from . import InstallerContext

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "/etc/node_exporter_installer/config.toml"
DEFAULT_CONFIG_DIR = "/etc/node_exporter_installer/config.d"

# (section, key) -> (context attribute, accepted types)
_FIELDS: dict[tuple[str, str], tuple[str, tuple[type, ...]]] = {
    ("release", "repo"): ("repo", (str,)),
    ("release", "version"): ("version", (str,)),
    ("release", "fallback_version"): ("fallback_version", (str,)),
    ("release", "arch"): ("arch", (str,)),
    ("paths", "download_dir"): ("download_dir", (str,)),
    ("paths", "bin_dir"): ("bin_dir", (str,)),
    ("paths", "unit_dir"): ("unit_dir", (str,)),
    ("service", "name"): ("service_name", (str,)),
    ("service", "user"): ("svc_user", (str,)),
    ("service", "group"): ("svc_group", (str,)),
    ("service", "port"): ("listen_port", (int,)),
    ("service", "extra_args"): ("extra_args", (list,)),
    ("verify", "startup_wait"): ("startup_wait", (int, float)),
    ("verify", "verify_wait"): ("verify_wait", (int, float)),
    ("install", "auto"): ("auto", (bool,)),
    ("install", "keep_files"): ("keep_files", (bool,)),
}


class ConfigError(Exception):
    """Raised when a configuration file has an invalid value."""


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts. override values take precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_toml(path: str | Path) -> dict[str, Any]:
    """Load a single TOML file and return its contents as a dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e


def _load_config_dir(config: dict[str, Any], config_d: Path) -> dict[str, Any]:
    """Load all *.toml files from a config.d directory as overlays."""
    if not config_d.is_dir():
        return config
    for override_file in sorted(config_d.glob("*.toml")):
        logger.info(f"Loading config override: {override_file}")
        config = deep_merge(config, _load_toml(override_file))
    return config


def load_config(
    config_paths: list[str] | None = None,
    *,
    base_path: str | None = None,
    config_dir: str | None = None,
) -> dict[str, Any]:
    """Load and merge TOML configuration.

    Without explicit paths the base file is loaded (if present) and every
    config.d/*.toml is overlaid in alphabetical order. With explicit paths
    only those files load, each overlaying the previous.
    """
    config: dict[str, Any] = {}
    if config_paths:
        for path in config_paths:
            if not os.path.exists(path):
                logger.error(f"Config file not found: {path}")
                continue
            logger.info(f"Loading config: {path}")
            config = deep_merge(config, _load_toml(path))
        return config

    base_path = base_path or DEFAULT_CONFIG_PATH
    config_dir = config_dir or DEFAULT_CONFIG_DIR
    if os.path.exists(base_path):
        config = _load_toml(base_path)
        logger.info(f"Loaded base config from {base_path}")
    else:
        logger.debug(f"No base config at {base_path}, using defaults")

    return _load_config_dir(config, Path(config_dir))


def apply_config(ctx: InstallerContext, config: dict[str, Any]) -> InstallerContext:
    """Copy recognized config values onto the context, validating their types."""
    for section, values in config.items():
        if not isinstance(values, dict):
            logger.debug(f"Ignoring top-level key: {section}")
            continue
        for key, value in values.items():
            target = _FIELDS.get((section, key))
            if target is None:
                logger.debug(f"Ignoring unknown config key: {section}.{key}")
                continue
            attr, types = target
            # bool is an int subclass; only accept it where bool is expected
            if isinstance(value, bool) and bool not in types:
                raise ConfigError(f"{section}.{key} must be {types[0].__name__}, got bool")
            if not isinstance(value, types):
                raise ConfigError(
                    f"{section}.{key} must be {types[0].__name__}, got {type(value).__name__}"
                )
            if attr == "extra_args":
                if not all(isinstance(a, str) for a in value):
                    raise ConfigError(f"{section}.{key} must be a list of strings")
                value = list(value)
            if attr == "listen_port" and not 1 <= value <= 65535:
                raise ConfigError(f"{section}.{key} must be between 1 and 65535, got {value}")
            setattr(ctx, attr, value)

    # A user override without an explicit group keeps group == user
    service = config.get("service", {})
    if isinstance(service, dict) and "user" in service and "group" not in service:
        ctx.svc_group = ctx.svc_user
    return ctx
