"""
Configuration loading.

Finds ``prjbuild.json`` (explicit path, or searched from a start directory
upward), validates it against the settings schema, and maps it onto the
domain's Settings records.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

from prjbuild.domain.exceptions import ConfigurationAbsent, ConfigurationError
from prjbuild.domain.settings import (
    ProjectConfig,
    RootDirectoryConfig,
    Settings,
    SolutionConfig,
)
from prjbuild.schemas import validate_settings

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "prjbuild.json"
DEFAULT_ARCHIVE_DIR_NAME = "archives"


def find_settings_file(start_dir: Path, file_name: str = SETTINGS_FILE_NAME) -> Path:
    """Search start_dir and then each parent directory for the settings file.

    Raises:
        ConfigurationAbsent: If no directory up to the filesystem root has one
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        candidate = directory / file_name
        if candidate.is_file():
            logger.debug("Using configuration %s", candidate)
            return candidate
    raise ConfigurationAbsent(
        f"No configuration found. Please ensure {file_name} exists in "
        f"{start} or one of its parent directories."
    )


def load_settings(path: Path) -> Settings:
    """
    Load and validate a settings file.

    Relative root and archive paths resolve against the file's directory.

    Args:
        path: Path to the settings file

    Returns:
        Settings for all three policy tiers

    Raises:
        ConfigurationAbsent: If the file does not exist
        ConfigurationError: If the file is unreadable, not JSON, or invalid
    """
    if not path.is_file():
        raise ConfigurationAbsent(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8-sig") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected object in {path}, got {type(data).__name__}")
    if not data:
        raise ConfigurationAbsent(f"No configuration found in {path}")

    try:
        validate_settings(data)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(f"{path}: {location}: {e.message}") from e

    return settings_from_dict(data, base_dir=path.parent.resolve())


def settings_from_dict(data: dict[str, Any], base_dir: Path) -> Settings:
    """Map validated configuration data onto Settings records."""
    return Settings(
        root_directories=tuple(
            _root_from_dict(r, base_dir) for r in data.get("rootDirectories", [])
        ),
        solutions=tuple(_solution_from_dict(s) for s in data.get("solutions", [])),
        ignored_names=tuple(data.get("ignoredNames", [])),
        ignored_path_fragments=tuple(data.get("ignoredPathFragments", [])),
    )


def _resolve(value: str, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path


def _root_from_dict(data: dict[str, Any], base_dir: Path) -> RootDirectoryConfig:
    root = _resolve(data["path"], base_dir)
    archive_dir = data.get("archiveDirectory")
    return RootDirectoryConfig(
        path=root,
        archive_directory=(
            _resolve(archive_dir, base_dir)
            if archive_dir
            else root / DEFAULT_ARCHIVE_DIR_NAME
        ),
    )


def _solution_from_dict(data: dict[str, Any]) -> SolutionConfig:
    return SolutionConfig(
        name=data["name"],
        is_retired=data.get("isRetired", False),
        projects=tuple(_project_from_dict(p) for p in data.get("projects", [])),
        ignored_names=tuple(data.get("ignoredNames", [])),
        ignored_path_fragments=tuple(data.get("ignoredPathFragments", [])),
    )


def _project_from_dict(data: dict[str, Any]) -> ProjectConfig:
    return ProjectConfig(
        name=data["name"],
        supported_runtimes=tuple(data.get("supportedRuntimes", [])),
        exclude_from_archiving=data.get("excludeFromArchiving"),
        is_retired=data.get("isRetired", False),
        ignored_names=tuple(data.get("ignoredNames", [])),
        ignored_path_fragments=tuple(data.get("ignoredPathFragments", [])),
        references=tuple(data.get("references", [])),
    )
