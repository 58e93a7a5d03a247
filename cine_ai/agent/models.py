"""
Data records shared by the planning and prompt-assembly components.

Fields are snake_case. Every record can be built from and converted to the
camelCase dictionary shape produced by the external script-analysis step
and expected by the persistence layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..catalog.genre_presets import StyleBible

# Re-exported so callers can import every record from one place
__all__ = [
    'DialogueLine', 'ScriptBeat', 'ScriptScene', 'AnalysisCharacter',
    'StyleSuggestions', 'ScriptAnalysis', 'CharacterRef', 'VoiceProfile',
    'ShotDialogue', 'Shot', 'PromptValidation', 'StyleBible',
]


def _mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


def _items(value: Any, what: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{what} must be a list, got {type(value).__name__}")
    return list(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _number(value: Any, default: int = 0) -> int:
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        return default


@dataclass
class DialogueLine:
    """One spoken line inside a beat"""
    character: str
    line: str
    emotion: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DialogueLine":
        data = _mapping(data, "dialogue entry")
        return cls(
            character=_text(data.get("character")),
            line=_text(data.get("line")),
            emotion=_text(data.get("emotion")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"character": self.character, "line": self.line, "emotion": self.emotion}


@dataclass
class ScriptBeat:
    """Smallest narrative unit; becomes exactly one shot"""
    description: str
    emotional_tone: str = ""
    dialogue: List[DialogueLine] = field(default_factory=list)

    @property
    def has_dialogue(self) -> bool:
        return len(self.dialogue) > 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptBeat":
        data = _mapping(data, "beat")
        return cls(
            description=_text(data.get("description")),
            emotional_tone=_text(data.get("emotionalTone")),
            dialogue=[DialogueLine.from_dict(d) for d in _items(data.get("dialogue"), "dialogue")],
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"description": self.description, "emotionalTone": self.emotional_tone}
        if self.dialogue:
            result["dialogue"] = [d.to_dict() for d in self.dialogue]
        return result


@dataclass
class ScriptScene:
    title: str
    location: str
    time_of_day: str = ""
    beats: List[ScriptBeat] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptScene":
        data = _mapping(data, "scene")
        return cls(
            title=_text(data.get("title")),
            location=_text(data.get("location")),
            time_of_day=_text(data.get("timeOfDay")),
            beats=[ScriptBeat.from_dict(b) for b in _items(data.get("beats"), "beats")],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "location": self.location,
            "timeOfDay": self.time_of_day,
            "beats": [b.to_dict() for b in self.beats],
        }


@dataclass
class AnalysisCharacter:
    """Character as proposed by the script analysis (not yet a roster entry)"""
    name: str
    role: str = ""
    suggested_visual_description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisCharacter":
        data = _mapping(data, "character")
        return cls(
            name=_text(data.get("name")),
            role=_text(data.get("role")),
            suggested_visual_description=_text(data.get("suggestedVisualDescription")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role,
            "suggestedVisualDescription": self.suggested_visual_description,
        }


@dataclass
class StyleSuggestions:
    genre: str = ""
    film_stock: str = ""
    color_palette: str = ""
    textures: List[str] = field(default_factory=list)
    negative_prompt: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StyleSuggestions":
        if data is None:
            return cls()
        data = _mapping(data, "styleSuggestions")
        return cls(
            genre=_text(data.get("genre")),
            film_stock=_text(data.get("filmStock")),
            color_palette=_text(data.get("colorPalette")),
            textures=[_text(t) for t in _items(data.get("textures"), "textures")],
            negative_prompt=_text(data.get("negativePrompt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "genre": self.genre,
            "filmStock": self.film_stock,
            "colorPalette": self.color_palette,
            "textures": list(self.textures),
            "negativePrompt": self.negative_prompt,
        }


@dataclass
class ScriptAnalysis:
    """Structured script produced by the external narrative-analysis step"""
    synopsis: str = ""
    genre: str = ""
    suggested_duration: int = 0
    scenes: List[ScriptScene] = field(default_factory=list)
    characters: List[AnalysisCharacter] = field(default_factory=list)
    style_suggestions: StyleSuggestions = field(default_factory=StyleSuggestions)
    estimated_shots: int = 0
    estimated_credits: int = 0

    @property
    def beat_count(self) -> int:
        return sum(len(scene.beats) for scene in self.scenes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptAnalysis":
        """
        Build an analysis from the camelCase payload.

        Missing optional keys fall back to empty values.

        Raises:
            ValueError: if the payload (or a nested scene/beat/list) has the
                wrong container type
        """
        data = _mapping(data, "analysis")
        return cls(
            synopsis=_text(data.get("synopsis")),
            genre=_text(data.get("genre")),
            suggested_duration=_number(data.get("suggestedDuration")),
            scenes=[ScriptScene.from_dict(s) for s in _items(data.get("scenes"), "scenes")],
            characters=[AnalysisCharacter.from_dict(c)
                        for c in _items(data.get("characters"), "characters")],
            style_suggestions=StyleSuggestions.from_dict(data.get("styleSuggestions")),
            estimated_shots=_number(data.get("estimatedShots")),
            estimated_credits=_number(data.get("estimatedCredits")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "synopsis": self.synopsis,
            "genre": self.genre,
            "suggestedDuration": self.suggested_duration,
            "scenes": [s.to_dict() for s in self.scenes],
            "characters": [c.to_dict() for c in self.characters],
            "styleSuggestions": self.style_suggestions.to_dict(),
            "estimatedShots": self.estimated_shots,
            "estimatedCredits": self.estimated_credits,
        }


@dataclass
class CharacterRef:
    """
    Roster entry for a production character.

    has_reference_images marks characters with generated reference art; only
    those get a visual-anchor tag in assembled prompts.
    """
    id: str
    name: str
    role: str = ""
    visual_description: str = ""
    kling_element_id: Optional[str] = None
    has_reference_images: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CharacterRef":
        data = _mapping(data, "character")
        if "hasReferenceImages" in data:
            has_refs = bool(data.get("hasReferenceImages"))
        else:
            has_refs = bool(data.get("referenceImages"))
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            role=_text(data.get("role")),
            visual_description=_text(data.get("visualDescription")),
            kling_element_id=data.get("klingElementId"),
            has_reference_images=has_refs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "visualDescription": self.visual_description,
            "klingElementId": self.kling_element_id,
            "hasReferenceImages": self.has_reference_images,
        }


@dataclass
class VoiceProfile:
    """How a character's lines should sound"""
    language: str = "English"
    accent: str = ""
    tone: str = ""
    speed: str = "normal"  # slow, normal, fast

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoiceProfile":
        data = _mapping(data, "voice profile")
        speed = _text(data.get("speed")) or "normal"
        if speed not in ("slow", "normal", "fast"):
            speed = "normal"
        return cls(
            language=_text(data.get("language")) or "English",
            accent=_text(data.get("accent")),
            tone=_text(data.get("tone")),
            speed=speed,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"language": self.language, "accent": self.accent,
                "tone": self.tone, "speed": self.speed}


@dataclass
class ShotDialogue:
    character_id: str
    character_name: str
    line: str
    emotion: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShotDialogue":
        data = _mapping(data, "shot dialogue")
        return cls(
            character_id=_text(data.get("characterId")),
            character_name=_text(data.get("characterName")),
            line=_text(data.get("line")),
            emotion=_text(data.get("emotion")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "characterId": self.character_id,
            "characterName": self.character_name,
            "line": self.line,
            "emotion": self.emotion,
        }


@dataclass
class Shot:
    """A planned camera setup; one per script beat"""
    scene_index: int
    order: int
    shot_type: str
    camera_movement: str
    subject: str = ""
    action: str = ""
    environment: str = ""
    lighting: str = ""
    duration_seconds: int = 5
    dialogue: Optional[ShotDialogue] = None
    include_dialogue: Optional[bool] = None
    generated_prompt: str = ""
    negative_prompt: str = ""
    camera_prompt: str = ""  # movement prompt fragment, filled in by the planner
    scene_element_name: Optional[str] = None

    @property
    def camera_text(self) -> str:
        """Text used for the camera block: the prompt fragment, else the raw id."""
        return self.camera_prompt or self.camera_movement

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Shot":
        data = _mapping(data, "shot")
        dialogue = data.get("dialogue")
        include = data.get("includeDialogue")
        return cls(
            scene_index=_number(data.get("sceneIndex")),
            order=_number(data.get("order")),
            shot_type=_text(data.get("shotType")),
            camera_movement=_text(data.get("cameraMovement")),
            subject=_text(data.get("subject")),
            action=_text(data.get("action")),
            environment=_text(data.get("environment")),
            lighting=_text(data.get("lighting")),
            duration_seconds=_number(data.get("durationSeconds"), 5),
            dialogue=ShotDialogue.from_dict(dialogue) if dialogue else None,
            include_dialogue=None if include is None else bool(include),
            generated_prompt=_text(data.get("generatedPrompt")),
            negative_prompt=_text(data.get("negativePrompt")),
            camera_prompt=_text(data.get("cameraPrompt")),
            scene_element_name=data.get("sceneElementName") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "sceneIndex": self.scene_index,
            "order": self.order,
            "shotType": self.shot_type,
            "cameraMovement": self.camera_movement,
            "subject": self.subject,
            "action": self.action,
            "environment": self.environment,
            "lighting": self.lighting,
            "durationSeconds": self.duration_seconds,
            "dialogue": self.dialogue.to_dict() if self.dialogue else None,
            "generatedPrompt": self.generated_prompt,
            "negativePrompt": self.negative_prompt,
            "cameraPrompt": self.camera_prompt,
        }
        if self.include_dialogue is not None:
            result["includeDialogue"] = self.include_dialogue
        if self.scene_element_name:
            result["sceneElementName"] = self.scene_element_name
        return result


@dataclass
class PromptValidation:
    is_valid: bool
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    character_coverage: bool = True
    estimated_quality: str = "medium"  # low, medium, high

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "characterCoverage": self.character_coverage,
            "estimatedQuality": self.estimated_quality,
        }
