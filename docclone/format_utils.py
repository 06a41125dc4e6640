"""
Output format utilities for docclone CLI commands.

Serializes the structured dependency result as JSON or YAML.
"""

import json
import os
from typing import Any, Dict, Optional

import yaml

FORMATS = ('json', 'yaml')


def format_json(data: Dict[str, Any]) -> str:
    """Format data as an indented JSON document."""
    return json.dumps(data, ensure_ascii=False, indent=2)


def format_yaml(data: Dict[str, Any]) -> str:
    """Format data as YAML."""
    return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False).rstrip("\n")


def format_result(data: Dict[str, Any], format: str = "json") -> str:
    """
    Format data according to the specified format.

    Args:
        data: Dictionary to format
        format: Output format (json, yaml)

    Returns:
        Formatted string
    """
    if format == "json":
        return format_json(data)
    elif format == "yaml":
        return format_yaml(data)
    else:
        raise ValueError(f"Unknown format: {format}")


def get_format_from_env(default: str = 'json') -> str:
    """
    Get output format from the DOCCLONE_FORMAT environment variable.

    Args:
        default: Format used when the variable is unset or invalid
    """
    env_format = os.environ.get('DOCCLONE_FORMAT', '').lower()
    return env_format if env_format in FORMATS else default


def resolve_format(explicit: Optional[str], config: Optional[Dict[str, Any]] = None) -> str:
    """Command-line flag, then environment, then configuration."""
    if explicit:
        return explicit
    configured = (config or {}).get("output", {}).get("format", "json")
    return get_format_from_env(configured if configured in FORMATS else 'json')
