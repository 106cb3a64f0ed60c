#  Copyright (c) 2025 Tom Villani, Ph.D.

"""Configuration file discovery and loading.

Plugin options can be kept in a dedicated file or in ``pyproject.toml``::

    # .adoc2node.toml
    fileExtensions = ["adoc", "asciidoc", "asc"]

    [attributes]
    imagesdir = "/assets/images@"
    showtitle = true

    [[plugins]]
    resolve = "my_site.asciidoc:register"
    pluginOptions = { level = 2 }

The same table may live under ``[tool.adoc2node]`` in ``pyproject.toml``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import yaml

from adoc2node.constants import CONFIG_FILENAMES, PYPROJECT_TOOL_SECTION
from adoc2node.exceptions import ConfigurationError


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.adoc2node]`` table of a pyproject.toml file.

    Returns
    -------
    dict
        The table, or an empty dict when the section is missing

    Raises
    ------
    ConfigurationError
        If the file cannot be parsed or the section is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in pyproject.toml {pyproject_path}: {e}", original_error=e) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading pyproject.toml {pyproject_path}: {e}", original_error=e) from e

    config = data.get("tool", {}).get(PYPROJECT_TOOL_SECTION)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"[tool.{PYPROJECT_TOOL_SECTION}] section in {pyproject_path} must be a table, got {type(config).__name__}"
        )
    return config


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file by searching parent directories.

    Each directory is checked for the dedicated config files first, then
    for a ``pyproject.toml`` that has a ``[tool.adoc2node]`` section.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        First config file found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except ConfigurationError:
                # Broken pyproject.toml, keep searching upwards
                pass

        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load plugin options from a TOML, YAML, JSON or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Raw plugin options

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable, malformed or not a mapping

    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file does not exist: {config_path}")

    filename = config_path.name.lower()
    ext = config_path.suffix.lower()

    if filename == "pyproject.toml":
        return _load_pyproject_section(config_path)

    try:
        if ext == ".toml":
            with open(config_path, "rb") as f:
                config = tomllib.load(f)
        elif ext in (".yaml", ".yml"):
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
            if config is None:
                config = {}
        elif ext == ".json":
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported config file format: {ext}. Use .json, .toml, or .yaml")
    except ConfigurationError:
        raise
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}", original_error=e) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading config file {config_path}: {e}", original_error=e) from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping, got {type(config).__name__}")
    return config


def load_discovered_config(start_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Load the nearest configuration file, or return an empty config."""
    config_path = find_config_in_parents(start_dir)
    if config_path is None:
        return {}
    return load_config_file(config_path)


__all__ = ["find_config_in_parents", "load_config_file", "load_discovered_config"]
