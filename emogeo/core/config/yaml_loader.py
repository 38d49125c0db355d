# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""YAML configuration file loader utilities.

Rule sets and other engine tables live in YAML files under ``config/``.
This module reads them and merges file overrides on top of the built-in
defaults.

Example:
    >>> from pathlib import Path
    >>> from emogeo.core.config.yaml_loader import deep_merge, load_yaml
    >>> overrides = load_yaml(Path("config/engine/rulesets.yaml"))
    >>> merged = deep_merge({"v2": {"critical_threshold": 8}}, overrides)
"""

from pathlib import Path
from typing import Any

import yaml


class YAMLLoadError(Exception):
    """Raised when YAML file cannot be loaded or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize YAMLLoadError.

        Args:
            path: Path to the YAML file that failed to load.
            reason: Description of why the file failed to load.
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load YAML file '{path}': {reason}")


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a single YAML file and return its contents as a dictionary.

    Args:
        path: Path to the YAML file to load.

    Returns:
        Dictionary containing the parsed YAML contents.
        Empty dict if file is empty.

    Raises:
        YAMLLoadError: If the file doesn't exist, cannot be read,
            or contains invalid YAML.
    """
    if not path.exists():
        raise YAMLLoadError(path, "File does not exist")

    if not path.is_file():
        raise YAMLLoadError(path, "Path is not a file")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise YAMLLoadError(path, f"Cannot read file: {e}") from e

    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise YAMLLoadError(path, f"Invalid YAML syntax: {e}") from e

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise YAMLLoadError(
            path, f"YAML root must be a mapping, got {type(parsed).__name__}"
        )

    return parsed


def load_yaml_section(path: Path, key: str) -> dict[str, Any]:
    """Load one top-level mapping from a YAML file.

    A missing key is an empty section.

    Args:
        path: Path to the YAML file to load.
        key: Top-level key of the section, e.g. ``rulesets``.

    Returns:
        The section contents.

    Raises:
        YAMLLoadError: If the file cannot be loaded or the section is not
            a mapping.
    """
    section = load_yaml(path).get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise YAMLLoadError(
            path, f"Section '{key}' must be a mapping, got {type(section).__name__}"
        )
    return section


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    Nested dictionaries are merged recursively. For non-dict values,
    the override value replaces the base value.

    Args:
        base: The base dictionary to merge into.
        override: The dictionary whose values take precedence.

    Returns:
        A new dictionary containing the merged result.
        Neither input dictionary is modified.

    Example:
        >>> deep_merge({"v2": {"critical_threshold": 8, "high_threshold": 6}},
        ...            {"v2": {"high_threshold": 5}})
        {'v2': {'critical_threshold': 8, 'high_threshold': 5}}
    """
    result: dict[str, Any] = base.copy()

    for key, override_value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(override_value, dict)
        ):
            result[key] = deep_merge(result[key], override_value)
        else:
            result[key] = override_value

    return result
