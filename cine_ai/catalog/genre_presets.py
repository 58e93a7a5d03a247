"""
Genre Preset Catalog

Each preset bundles a style bible template with the camera moves, lighting
vocabulary and pacing that suit the genre. Preset camera preferences are
cross-checked against the camera movement catalog at load time.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .camera_movements import list_camera_movements
from .loader import CatalogError, entry_list, load_yaml, require_fields, resolve_config_dir

logger = logging.getLogger(__name__)

PACING_LABELS = ("slow", "medium", "fast")
MIN_AVG_SHOT_DURATION = 3
MAX_AVG_SHOT_DURATION = 10


@dataclass(frozen=True)
class StyleBible:
    """Reusable visual style applied to every prompt of a production"""
    film_stock: str = ""
    color_palette: str = ""
    textures: Tuple[str, ...] = field(default_factory=tuple)
    negative_prompt: str = ""
    style_string: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StyleBible":
        """Build from either the camelCase or the snake_case shape."""
        if not isinstance(data, dict):
            raise ValueError("style bible must be a mapping")

        def pick(camel: str, snake: str) -> str:
            value = data.get(camel, data.get(snake))
            return str(value).strip() if value is not None else ""

        return cls(
            film_stock=pick("filmStock", "film_stock"),
            color_palette=pick("colorPalette", "color_palette"),
            textures=tuple(str(t) for t in (data.get("textures") or [])),
            negative_prompt=pick("negativePrompt", "negative_prompt"),
            style_string=pick("styleString", "style_string"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filmStock": self.film_stock,
            "colorPalette": self.color_palette,
            "textures": list(self.textures),
            "negativePrompt": self.negative_prompt,
            "styleString": self.style_string,
        }


@dataclass(frozen=True)
class GenrePreset:
    """A genre's style bible, preferred camera moves and pacing"""
    id: str
    name: str
    description: str
    style_bible: StyleBible
    camera_preferences: Tuple[str, ...]
    lighting_keywords: Tuple[str, ...]
    pacing: str
    avg_shot_duration: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "styleBible": self.style_bible.to_dict(),
            "cameraPreferences": list(self.camera_preferences),
            "lightingKeywords": list(self.lighting_keywords),
            "pacing": self.pacing,
            "avgShotDuration": self.avg_shot_duration,
        }


def _parse_entry(entry: Dict[str, Any], index: int, movement_ids: set) -> GenrePreset:
    where = f"genre_presets.yaml: presets[{index}]"
    require_fields(entry, ("id", "name", "style_bible", "camera_preferences",
                           "pacing", "avg_shot_duration"), where)
    preset_id = str(entry["id"])

    bible = entry["style_bible"]
    if not isinstance(bible, dict):
        raise CatalogError(f"{where} ({preset_id}): style_bible must be a mapping")
    require_fields(bible, ("style_string",), f"{where} ({preset_id}).style_bible")

    preferences = tuple(str(p) for p in entry["camera_preferences"])
    unknown = [p for p in preferences if p not in movement_ids]
    if unknown:
        raise CatalogError(
            f"{where} ({preset_id}): unknown camera movement(s) {', '.join(unknown)}"
        )

    pacing = entry["pacing"]
    if pacing not in PACING_LABELS:
        raise CatalogError(f"{where} ({preset_id}): unknown pacing '{pacing}'")

    try:
        avg = int(entry["avg_shot_duration"])
    except (TypeError, ValueError):
        raise CatalogError(f"{where} ({preset_id}): avg_shot_duration must be an integer")
    if not MIN_AVG_SHOT_DURATION <= avg <= MAX_AVG_SHOT_DURATION:
        raise CatalogError(
            f"{where} ({preset_id}): avg_shot_duration {avg} outside "
            f"[{MIN_AVG_SHOT_DURATION}, {MAX_AVG_SHOT_DURATION}]"
        )

    return GenrePreset(
        id=preset_id,
        name=str(entry["name"]),
        description=str(entry.get("description") or "").strip(),
        style_bible=StyleBible.from_dict(bible),
        camera_preferences=preferences,
        lighting_keywords=tuple(str(k) for k in (entry.get("lighting_keywords") or [])),
        pacing=pacing,
        avg_shot_duration=avg,
    )


@lru_cache(maxsize=None)
def _load_catalog(config_dir: Path) -> Tuple[GenrePreset, ...]:
    movement_ids = {m.id for m in list_camera_movements(config_dir)}
    data = load_yaml(config_dir / "genre_presets.yaml")
    entries = entry_list(data, "presets", "genre_presets.yaml")

    presets: List[GenrePreset] = []
    for i, entry in enumerate(entries):
        preset = _parse_entry(entry, i, movement_ids)
        if any(p.id == preset.id for p in presets):
            raise CatalogError(f"genre_presets.yaml: duplicate preset id '{preset.id}'")
        presets.append(preset)

    logger.debug("Loaded %d genre presets from %s", len(presets), config_dir)
    return tuple(presets)


def list_genre_presets(config_dir: Optional[Path] = None) -> Tuple[GenrePreset, ...]:
    """All presets in catalog order."""
    return _load_catalog(resolve_config_dir(config_dir))


def get_genre_preset(preset_id: str, config_dir: Optional[Path] = None) -> Optional[GenrePreset]:
    """Look up a preset by id, None if unknown."""
    for preset in list_genre_presets(config_dir):
        if preset.id == preset_id:
            return preset
    return None
