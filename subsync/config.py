#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

# Shared by every subsync module logger
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("subsync")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Return the config file subsync reads.

    ``$SUBSYNC_CONFIG`` wins when it names an existing file. Otherwise the
    first non-empty ``~/.subsync/config.{json,toml,yaml,yml}`` is used, and
    ``~/.subsync/config.json`` is returned when none exists.
    """
    override = os.environ.get('SUBSYNC_CONFIG')
    if override:
        path = Path(override).expanduser()
        if path.exists():
            return path
        logger.debug(f"SUBSYNC_CONFIG points to missing file {path}")

    config_dir = Path.home() / '.subsync'
    candidates = (config_dir / name for name in CONFIG_FILENAMES)
    found = next((p for p in candidates if p.exists() and p.stat().st_size > 0), None)
    return found or config_dir / CONFIG_FILENAMES[0]


def _read_config_file(config_path: Path) -> dict:
    """Parse a config file according to its suffix."""
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config():
    """Defaults, then the user's config file, then SUBSYNC_* variables.

    An unreadable or malformed file is logged and skipped.
    """
    config = get_default_config()
    config_path = get_config_path()

    if config_path.exists():
        try:
            user_config = _read_config_file(config_path)
            if not isinstance(user_config, dict):
                raise ValueError("top level must be a mapping")
        except (OSError, ValueError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
            logger.error(f"Ignoring config file {config_path}: {e}")
        else:
            config = merge_configs(config, user_config)

    return apply_env_overrides(config)


def get_default_config():
    return {
        "list_file": "submodules.txt",
        "gitignore_file": ".gitignore",
        "readme_file": "README.md",
        "gitmodules_file": ".gitmodules",
        "commit_message": "Sync submodules",
        "git": {
            # 0 waits forever, like a plain `git submodule add`
            "timeout_seconds": 0,
        },
        "logging": {"level": "INFO"},
    }


def merge_configs(base_config, override_config):
    """
    Merge ``override_config`` into a copy of ``base_config``.

    Nested dicts are merged key by key; any other value replaces the base.
    """
    merged = dict(base_config)
    for key, value in override_config.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            value = merge_configs(base_value, value)
        merged[key] = value
    return merged


def _typed_env_value(value: str):
    lowered = value.lower()
    if value.isdigit():
        return int(value)
    if lowered in ('true', 'yes', 'on'):
        return True
    if lowered in ('false', 'no', 'off'):
        return False
    return value


def _resolve_env_key(config, parts):
    """
    Map the lowercased parts of an env var name onto a config key path.

    Config keys may contain underscores themselves, so at each level the
    longest key matching the next parts is taken. Returns the dict that
    holds the final key and the key, or None when nothing matches.
    """
    level = config
    while parts:
        matches = [
            key for key in level
            if parts[:len(key.split('_'))] == key.split('_')
        ]
        if not matches:
            return None
        key = max(matches, key=lambda k: len(k.split('_')))
        parts = parts[len(key.split('_')):]
        if not parts:
            return level, key
        level = level[key]
        if not isinstance(level, dict):
            return None
    return None


def apply_env_overrides(config):
    """
    Apply SUBSYNC_* environment variables to ``config`` in place.

    SUBSYNC_LIST_FILE=repos.txt sets ``list_file``;
    SUBSYNC_GIT_TIMEOUT_SECONDS=600 sets ``git.timeout_seconds``.
    Variables that name no existing key are ignored.
    """
    prefix = "SUBSYNC_"
    for env_key, value in os.environ.items():
        if not env_key.startswith(prefix):
            continue
        target = _resolve_env_key(config, env_key[len(prefix):].lower().split('_'))
        if target is not None:
            level, key = target
            level[key] = _typed_env_value(value)
    return config


def configure_logging(config, debug: bool = False) -> None:
    """Set the subsync logger level from config, or DEBUG when requested."""
    if debug:
        logger.setLevel(logging.DEBUG)
        return
    level_name = str(config.get("logging", {}).get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        logger.warning(f"Unknown log level {level_name!r}, using INFO")
        level = logging.INFO
    logger.setLevel(level)
