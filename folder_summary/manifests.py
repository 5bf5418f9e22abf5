"""Package manifest parsing (package.json, Cargo.toml, pyproject.toml)."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from .logging import get_logger

logger = get_logger("manifests")


def parse_package_files(root: str | Path) -> Dict[str, str]:
    """Map package name to version for every readable manifest in ``root``."""
    root_path = Path(root)
    packages: Dict[str, str] = {}
    for name, version in (
        _name_and_version(_read_json(root_path / "package.json")),
        _name_and_version(_toml_table(root_path / "Cargo.toml", "package")),
        _name_and_version(_toml_table(root_path / "pyproject.toml", "project")),
    ):
        if name and version:
            packages[name] = version
    return packages


def get_project_name(root: str | Path) -> Optional[str]:
    """Return the declared project name, preferring Cargo, then npm, then pyproject."""
    root_path = Path(root)
    for manifest in (
        _toml_table(root_path / "Cargo.toml", "package"),
        _read_json(root_path / "package.json"),
        _toml_table(root_path / "pyproject.toml", "project"),
    ):
        name = manifest.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def _name_and_version(manifest: Dict[str, Any]) -> tuple[Optional[str], Optional[str]]:
    name = manifest.get("name")
    version = manifest.get("version")
    if isinstance(name, str) and isinstance(version, str):
        return name, version
    return None, None


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Skipping unreadable manifest %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _toml_table(path: Path, table: str) -> Dict[str, Any]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Skipping unreadable manifest %s: %s", path, exc)
        return {}
    section = data.get(table)
    return section if isinstance(section, dict) else {}


__all__ = ["get_project_name", "parse_package_files"]
