#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

logger = logging.getLogger("docclone")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. DOCCLONE_CONFIG environment variable
    2. ~/.docclone/ directory
    """
    if 'DOCCLONE_CONFIG' in os.environ:
        path = Path(os.environ['DOCCLONE_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.docclone'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path
    return config_dir / 'config.json'


def get_default_config():
    """Get default configuration."""
    return {
        "git": {
            "executable": "git",
            "timeout_seconds": 0,  # 0 disables the per-command timeout
            "default_branch": "main",
            "depth": 1
        },
        "checkout": {
            "config_filename": "docfx.json",
            "create_default": False
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        },
        "output": {
            "format": "json"
        }
    }


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() == '.toml':
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    return apply_env_overrides(config)


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: DOCCLONE_SECTION_KEY
    For example: DOCCLONE_GIT_TIMEOUT_SECONDS=30
    """
    env_prefix = "DOCCLONE_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "DOCCLONE_CONFIG":
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key that is a prefix of the remaining parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                break

    return config


def configure_logging(config=None, silent: bool = False):
    """
    Configure the root logging handler from the ``logging`` section.

    Args:
        config: Configuration dict (loads default if None)
        silent: Only report errors
    """
    config = config or load_config()
    log_config = config.get("logging", {})
    level_name = "ERROR" if silent else str(log_config.get("level", "WARNING")).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format=log_config.get("format", "%(levelname)s: %(message)s"),
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True
    )
