"""
Scene Reference Planning

Plans the set of empty-location reference images (a "scene pack") for one
scene. The images anchor a scene's look across shots through the
@element_scene_<index> tag. Image generation itself happens elsewhere.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..catalog.genre_presets import StyleBible
from .models import ScriptScene
from .prompt_assembler import collapse_sentences

logger = logging.getLogger(__name__)

ATMOSPHERIC = re.compile(r"night|dawn|dusk|storm|rain|fog|mist|dark|dim|candle|neon|moonlight",
                         re.IGNORECASE)

NO_PEOPLE = "Empty scene, no people, no characters, no figures, no human presence"

MAX_ENVIRONMENT_DETAILS = 2


def _is_atmospheric(scene: ScriptScene) -> bool:
    return bool(ATMOSPHERIC.search(scene.time_of_day) or ATMOSPHERIC.search(scene.location))


@dataclass(frozen=True)
class AngleSpec:
    angle: str
    framing: str
    applies: Callable[[ScriptScene], bool]


ANGLE_SPECS = (
    AngleSpec("wide", "Wide establishing shot showing the full location", lambda scene: True),
    AngleSpec("medium", "Medium shot showing key set pieces and architectural details",
              lambda scene: True),
    AngleSpec("detail", "Close-up detail shot of distinctive environment textures and objects",
              lambda scene: True),
    AngleSpec("atmospheric", "Atmospheric shot emphasizing lighting, mood, and ambient qualities",
              _is_atmospheric),
)


@dataclass
class ScenePackImage:
    angle: str
    prompt: str

    def to_dict(self) -> Dict[str, Any]:
        return {"angle": self.angle, "prompt": self.prompt}


@dataclass
class ScenePackPlan:
    """Reference images to generate for one scene"""
    scene_index: int
    element_name: str
    images: List[ScenePackImage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sceneIndex": self.scene_index,
            "elementName": self.element_name,
            "images": [image.to_dict() for image in self.images],
        }


def scene_element_name(scene_index: int) -> str:
    return f"element_scene_{scene_index}"


def build_angle_prompt(spec: AngleSpec, scene: ScriptScene,
                       style_bible: Optional[StyleBible],
                       shot_environments: Sequence[str]) -> str:
    """Framing, location and time, a few environment details, no people, style last."""
    parts = [spec.framing, ", ".join(p for p in (scene.location, scene.time_of_day) if p)]

    unique = list(dict.fromkeys(env for env in shot_environments if env))
    if unique:
        parts.append(". ".join(unique[:MAX_ENVIRONMENT_DETAILS]))

    parts.append(NO_PEOPLE)
    if style_bible is not None and style_bible.style_string:
        parts.append(style_bible.style_string)

    return collapse_sentences(". ".join(p for p in parts if p))


def plan_scene_reference(scene_index: int, scene: ScriptScene,
                         style_bible: Optional[StyleBible] = None,
                         shot_environments: Sequence[str] = ()) -> ScenePackPlan:
    """
    Plan the reference images for a scene.

    Wide, medium and detail angles are always planned; an atmospheric angle
    is added for night, weather and low-light settings.

    Args:
        scene_index: Index of the scene in the script
        scene: The scene
        style_bible: Optional style bible appended to every prompt
        shot_environments: Environment strings of the scene's shots

    Returns:
        ScenePackPlan with one image per applicable angle
    """
    images = [
        ScenePackImage(spec.angle, build_angle_prompt(spec, scene, style_bible, shot_environments))
        for spec in ANGLE_SPECS
        if spec.applies(scene)
    ]
    logger.debug("Scene %d reference pack: %s", scene_index, ", ".join(i.angle for i in images))
    return ScenePackPlan(scene_index=scene_index,
                         element_name=scene_element_name(scene_index),
                         images=images)


def scene_reference_image_count(scene: ScriptScene) -> int:
    """Number of reference images a scene needs."""
    return sum(1 for spec in ANGLE_SPECS if spec.applies(scene))
