"""
Catalog Loader - YAML access for the packaged reference data

Handles:
- Locating the packaged configs directory (or a caller override)
- Reading catalog and tunables files with yaml.safe_load
- The CatalogError raised when reference data fails its integrity checks
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent / "configs"


class CatalogError(ValueError):
    """Raised when a catalog file is missing required data or is inconsistent."""


def resolve_config_dir(config_dir: Optional[Path] = None) -> Path:
    """Return the directory holding the YAML files."""
    if config_dir is None:
        return DEFAULT_CONFIG_DIR
    return Path(config_dir)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping, returning {} when the file does not exist."""
    path = Path(path)
    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise CatalogError(f"{path.name}: top level must be a mapping")
    return data


@lru_cache(maxsize=None)
def _load_defaults_cached(config_dir: Path) -> Dict[str, Any]:
    return load_yaml(config_dir / "defaults.yaml")


def load_defaults(config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Load defaults.yaml (cached per directory)."""
    return _load_defaults_cached(resolve_config_dir(config_dir))


def load_section(section: str, config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Return one section of defaults.yaml.

    Args:
        section: Top-level key, e.g. "shot_planning"
        config_dir: Optional override of the configs directory

    Returns:
        A fresh dict (empty when the file or section is missing)
    """
    value = load_defaults(config_dir).get(section) or {}
    if not isinstance(value, dict):
        logger.warning("Ignoring malformed '%s' section in defaults.yaml", section)
        return {}
    return dict(value)


def require_fields(entry: Dict[str, Any], fields: Sequence[str], where: str) -> None:
    """Raise CatalogError naming the first missing (or empty) field."""
    for name in fields:
        if entry.get(name) in (None, ""):
            raise CatalogError(f"{where}: missing required field '{name}'")


def entry_list(data: Dict[str, Any], key: str, filename: str) -> List[Dict[str, Any]]:
    """Return data[key] as a list of mappings or raise CatalogError."""
    entries = data.get(key)
    if not isinstance(entries, list) or not entries:
        raise CatalogError(f"{filename}: expected a non-empty '{key}' list")
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise CatalogError(f"{filename}: {key}[{i}] is not a mapping")
    return entries


def clear_caches() -> None:
    """Forget every cached catalog (used after editing YAML at runtime)."""
    from . import camera_movements, genre_presets

    _load_defaults_cached.cache_clear()
    camera_movements._load_catalog.cache_clear()
    genre_presets._load_catalog.cache_clear()
