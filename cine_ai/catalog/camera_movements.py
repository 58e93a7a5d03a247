"""
Camera Movement Catalog

Immutable reference table of the camera moves the shot planner can pick
from. Entries are read from configs/camera_movements.yaml and validated
once per configs directory.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .loader import CatalogError, entry_list, load_yaml, require_fields, resolve_config_dir

logger = logging.getLogger(__name__)

CATEGORIES = ("establishing", "character", "action", "transition")

_REQUIRED = ("id", "name", "category", "description", "best_for",
             "prompt_syntax", "min_duration", "example_prompt")


@dataclass(frozen=True)
class CameraMovement:
    """One catalog entry"""
    id: str
    name: str
    category: str
    description: str
    best_for: str
    prompt_syntax: str
    min_duration: int
    example_prompt: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase dictionary shape"""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "bestFor": self.best_for,
            "promptSyntax": self.prompt_syntax,
            "minDuration": self.min_duration,
            "examplePrompt": self.example_prompt,
        }


def _parse_entry(entry: Dict[str, Any], index: int) -> CameraMovement:
    where = f"camera_movements.yaml: movements[{index}]"
    require_fields(entry, _REQUIRED, where)

    category = entry["category"]
    if category not in CATEGORIES:
        raise CatalogError(f"{where} ({entry['id']}): unknown category '{category}'")

    try:
        min_duration = int(entry["min_duration"])
    except (TypeError, ValueError):
        raise CatalogError(f"{where} ({entry['id']}): min_duration must be an integer")
    if min_duration < 1:
        raise CatalogError(f"{where} ({entry['id']}): min_duration must be >= 1")

    return CameraMovement(
        id=str(entry["id"]),
        name=str(entry["name"]),
        category=category,
        description=str(entry["description"]).strip(),
        best_for=str(entry["best_for"]).strip(),
        prompt_syntax=str(entry["prompt_syntax"]).strip(),
        min_duration=min_duration,
        example_prompt=str(entry["example_prompt"]).strip(),
    )


@lru_cache(maxsize=None)
def _load_catalog(config_dir: Path) -> Tuple[CameraMovement, ...]:
    data = load_yaml(config_dir / "camera_movements.yaml")
    entries = entry_list(data, "movements", "camera_movements.yaml")

    movements = []
    seen = set()
    for i, entry in enumerate(entries):
        movement = _parse_entry(entry, i)
        if movement.id in seen:
            raise CatalogError(f"camera_movements.yaml: duplicate movement id '{movement.id}'")
        seen.add(movement.id)
        movements.append(movement)

    logger.debug("Loaded %d camera movements from %s", len(movements), config_dir)
    return tuple(movements)


def list_camera_movements(config_dir: Optional[Path] = None) -> Tuple[CameraMovement, ...]:
    """All movements in catalog order."""
    return _load_catalog(resolve_config_dir(config_dir))


def camera_movement_index(config_dir: Optional[Path] = None) -> Dict[str, CameraMovement]:
    """Map of movement id to movement."""
    return {m.id: m for m in list_camera_movements(config_dir)}


def get_camera_movement(movement_id: str,
                        config_dir: Optional[Path] = None) -> Optional[CameraMovement]:
    """Look up a movement by id, None if unknown."""
    for movement in list_camera_movements(config_dir):
        if movement.id == movement_id:
            return movement
    return None


def movements_by_category(category: str,
                          config_dir: Optional[Path] = None) -> Tuple[CameraMovement, ...]:
    """Movements of one category, in catalog order (empty for unknown categories)."""
    return tuple(m for m in list_camera_movements(config_dir) if m.category == category)
