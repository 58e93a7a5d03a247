"""
Prompt Assembler - Compiles a planned shot into a generation prompt

This module handles:
- Ordering content blocks (environment, subject, action, camera, dialogue,
  lighting, style) into one sentence-joined prompt
- Visual-anchor substitution for characters with reference images
- Temporal enrichment of short actions in long shots
- Negative prompts, multi-shot storyboard prompts and prompt validation
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..catalog.genre_presets import StyleBible
from ..catalog.loader import load_section
from .models import CharacterRef, PromptValidation, Shot, ShotDialogue, VoiceProfile

logger = logging.getLogger(__name__)

# Actions already containing progression language are left alone
TEMPORAL_LANGUAGE = re.compile(
    r"\b(then|before\s|after\s|while\s|slowly|gradually|begins?\sto|starts?\sto|"
    r"eventually|finally|continues?\sto|first\s|next\s|meanwhile|picks?\sup|sets?\sdown|"
    r"turns?\s(to|around|back)|steps?\s|reaches?\s(for|out)|pulls?\s|pushes?\s|"
    r"opens?\s|closes?\s)\b",
    re.IGNORECASE,
)

_REPEATED_PERIODS = re.compile(r"\.(\s*\.)+")
_REPEATED_SPACES = re.compile(r"\s{2,}")
_WORD = re.compile(r"\w+")
_AND_BOUNDARY = re.compile(r"\s+and\s+", re.IGNORECASE)
_COMMA_GAP = re.compile(r",\s*")


def collapse_sentences(text: str) -> str:
    """Collapse runs of periods and whitespace left over from joining blocks."""
    text = _REPEATED_PERIODS.sub(".", text)
    return _REPEATED_SPACES.sub(" ", text).strip()


def element_name_for(name: str) -> str:
    """Anchor slug for a character name ("Marcus Chen" -> "element_marcus_chen")."""
    return "element_" + "_".join(name.lower().split())


def _name_spans(text: str, name: str) -> List[Tuple[int, int]]:
    """
    Find whole-word occurrences of a (possibly multi-word) name.

    Both the text and the name are split into word tokens; a match is a run
    of consecutive text tokens equal (case-insensitively) to the name tokens.
    Tokens glued to other word characters, such as the "marcus" inside
    "@element_marcus", are never matched.
    """
    wanted = [w.lower() for w in _WORD.findall(name)]
    if not wanted:
        return []

    tokens = list(_WORD.finditer(text))
    spans = []
    i = 0
    while i <= len(tokens) - len(wanted):
        window = tokens[i:i + len(wanted)]
        if all(tok.group().lower() == w for tok, w in zip(window, wanted)):
            spans.append((window[0].start(), window[-1].end()))
            i += len(wanted)
        else:
            i += 1
    return spans


def _replace_spans(text: str, spans: Sequence[Tuple[int, int]], replacement: str) -> str:
    for start, end in sorted(spans, reverse=True):
        text = text[:start] + replacement + text[end:]
    return text


def _description_spans(text: str, name: str, description: str) -> List[Tuple[int, int]]:
    """Spans covering "Name, <exact visual description>"."""
    description = description.strip()
    if not description:
        return []
    spans = []
    for start, end in _name_spans(text, name):
        gap = _COMMA_GAP.match(text, end)
        if not gap:
            continue
        tail = text[gap.end():gap.end() + len(description)]
        if tail.lower() == description.lower():
            spans.append((start, gap.end() + len(description)))
    return spans


def _clause_spans(text: str, name: str) -> List[Tuple[int, int]]:
    """Spans covering "Name, <anything>" up to the next " and " (no anchors inside)."""
    spans = []
    for start, end in _name_spans(text, name):
        if not text.startswith(",", end) or not text[end + 1:end + 2].isspace():
            continue
        boundary = _AND_BOUNDARY.search(text, end + 1)
        if not boundary:
            continue
        if "@" in text[end:boundary.start()]:
            continue
        spans.append((start, boundary.start()))
    return spans


def _drop_overlaps(spans: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
    kept: List[Tuple[int, int]] = []
    for span in sorted(spans):
        if kept and span[0] < kept[-1][1]:
            continue
        kept.append(span)
    return kept


def has_anchor(text: str, anchor: str) -> bool:
    """Whole-token anchor match: "@element_ann" is not found in "@element_anna"."""
    return re.search(re.escape(anchor) + r"(?!\w)", text) is not None


def mentions_character(text: str, character: CharacterRef) -> bool:
    """
    True when text mentions the character by full name or by a first/last
    name of at least three letters, matched as whole words.
    """
    if not character.name.strip():
        return False
    if _name_spans(text, character.name):
        return True
    parts = [p for p in character.name.split() if len(p) >= 3]
    return any(_name_spans(text, part) for part in parts)


class PromptAssembler:
    """
    Turns structured shot data into the text prompt sent to the video model.

    Blocks follow a grounding-first order: where (environment), who
    (subject), what (action), how it is seen (camera), what is heard
    (dialogue), lighting, and the style bible string last.
    """

    DEFAULTS = {
        'min_prompt_chars': 50,
        'max_prompt_chars': 2000,
        'artifact_risk_seconds': 8,
        'orbit_min_seconds': 10,
        'max_multi_shots': 6,
        'universal_negatives': [
            "blur", "flicker", "distorted faces", "warped limbs",
            "unrealistic proportions", "morphing", "deformed hands",
            "extra fingers", "mutation", "disfigured", "low quality",
            "artifacts", "glitch",
        ],
    }

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the assembler.

        Args:
            config_dir: Path to configuration directory
        """
        self.settings = dict(self.DEFAULTS)
        self.settings.update(load_section('prompt_assembly', config_dir))

    # ── Blocks ────────────────────────────────────────────────────────

    @staticmethod
    def build_camera_block(shot_type: str, camera_text: str) -> str:
        """Movement text, with the shot type appended unless already mentioned."""
        camera_text = (camera_text or "").strip()
        shot_type = (shot_type or "").strip()
        if not camera_text:
            return shot_type
        if shot_type.lower() in camera_text.lower():
            return camera_text
        return f"{camera_text}, {shot_type}"

    @staticmethod
    def build_environment_block(environment: str, scene_element_name: Optional[str]) -> str:
        block = (environment or "").strip()
        if scene_element_name:
            block = f"@{scene_element_name} {block}".strip()
        return block

    def build_subject_block(self, subject: str, characters: Sequence[CharacterRef]) -> str:
        """
        Replace character mentions with visual-anchor tags.

        Only characters with reference images are anchored. For each one the
        first matching form wins:
          1. "Name, <exact visual description>"
          2. "Name, <text>" up to the next " and "
          3. the bare name
        A character still mentioned by first or last name but missing its tag
        afterwards gets a trailing "@element_x is present in the scene" clause.

        Args:
            subject: Subject text from the shot
            characters: Production roster

        Returns:
            Subject text with anchors applied
        """
        result = subject or ""

        for character in characters:
            if not character.has_reference_images or not character.name.strip():
                continue
            anchor = "@" + element_name_for(character.name)

            spans = _description_spans(result, character.name, character.visual_description)
            if not spans:
                spans = _clause_spans(result, character.name)
            if not spans:
                spans = _name_spans(result, character.name)
            if spans:
                result = _replace_spans(result, _drop_overlaps(spans), anchor)

        for character in characters:
            if not character.has_reference_images:
                continue
            anchor = "@" + element_name_for(character.name)
            if not has_anchor(result, anchor) and mentions_character(result, character):
                logger.debug("Grounding %s with a trailing anchor clause", character.name)
                result += f". {anchor} is present in the scene"

        return _REPEATED_SPACES.sub(" ", result).strip()

    @staticmethod
    def format_dialogue(dialogue: Optional[ShotDialogue],
                        voice_profile: Optional[VoiceProfile] = None) -> str:
        """
        Format a spoken line as [Name, voice description]: "line".

        Returns "" when there is no dialogue or the name or line is blank.
        """
        if dialogue is None:
            return ""
        if not dialogue.character_name.strip() or not dialogue.line.strip():
            return ""

        voice_parts = [dialogue.emotion]
        if voice_profile is not None:
            if voice_profile.tone:
                voice_parts.append(voice_profile.tone)
            if voice_profile.accent:
                voice_parts.append(f"{voice_profile.accent} accent")
            if voice_profile.speed and voice_profile.speed != "normal":
                voice_parts.append(f"{voice_profile.speed} pace")
        voice = ", ".join(voice_parts)

        return f'[{dialogue.character_name}, {voice} voice]: "{dialogue.line}"'

    @staticmethod
    def enrich_action(action: str, duration_seconds: int) -> str:
        """
        Give short actions in long shots an explicit timeline.

        Shots over 5 seconds whose action has fewer than 12 words and no
        progression language become "First, ... Then, ..." (6-7s) or
        "First, ... Then, ... Finally, ..." (8s and up).
        """
        if duration_seconds <= 5 or not action:
            return action
        if TEMPORAL_LANGUAGE.search(action):
            return action
        if len(action.split()) >= 12:
            return action

        opening = action[0].lower() + action[1:]
        if duration_seconds >= 8:
            return (f"First, {opening}. Then, the action develops and intensifies. "
                    f"Finally, the moment settles into stillness")
        return f"First, {opening}. Then, the moment lingers and develops"

    # ── Prompts ───────────────────────────────────────────────────────

    def assemble(self, shot: Shot, characters: Sequence[CharacterRef],
                 style_bible: Optional[StyleBible] = None,
                 voice_profiles: Optional[Dict[str, VoiceProfile]] = None) -> str:
        """
        Compile the generation prompt for one shot.

        Args:
            shot: Planned shot
            characters: Production roster
            style_bible: Optional style bible (its style string goes last)
            voice_profiles: Optional voice profiles keyed by character id

        Returns:
            Prompt string with empty blocks omitted
        """
        blocks = [
            self.build_environment_block(shot.environment, shot.scene_element_name),
            self.build_subject_block(shot.subject, characters),
            self.enrich_action(shot.action, shot.duration_seconds),
            self.build_camera_block(shot.shot_type, shot.camera_text),
        ]

        if shot.include_dialogue is not False:
            profile = None
            if shot.dialogue is not None and shot.dialogue.character_id and voice_profiles:
                profile = voice_profiles.get(shot.dialogue.character_id)
            blocks.append(self.format_dialogue(shot.dialogue, profile))

        blocks.append(shot.lighting)
        if style_bible is not None:
            blocks.append(style_bible.style_string)

        return collapse_sentences(". ".join(b for b in blocks if b))

    def format_negative_prompt(self, style_bible: Optional[StyleBible] = None,
                               extra: Optional[Sequence[str]] = None) -> str:
        """Style bible negatives, universal artifact exclusions, then extras."""
        parts = []
        if style_bible is not None and style_bible.negative_prompt:
            parts.append(style_bible.negative_prompt)
        parts.append(", ".join(self.settings['universal_negatives']))
        if extra:
            parts.append(", ".join(extra))
        return ", ".join(parts)

    def assemble_multi_shot(self, shots: Sequence[Shot], characters: Sequence[CharacterRef],
                            style_bible: Optional[StyleBible] = None) -> str:
        """
        Storyboard prompt for multi-shot generation.

        Only the first max_multi_shots shots are included; the rest are dropped.
        """
        limit = int(self.settings['max_multi_shots'])
        if len(shots) > limit:
            logger.debug("Multi-shot prompt truncated from %d to %d shots", len(shots), limit)

        lines = []
        for number, shot in enumerate(shots[:limit], start=1):
            parts = [
                self.build_camera_block(shot.shot_type, shot.camera_text),
                self.build_subject_block(shot.subject, characters),
                shot.action,
            ]
            line = collapse_sentences(
                f"Shot {number} ({shot.duration_seconds}s): {', '.join(p for p in parts if p)}."
            )
            dialogue = self.format_dialogue(shot.dialogue)
            if dialogue:
                line += f"\n  {dialogue}"
            lines.append(line)

        result = "\n".join(lines)
        if style_bible is not None and style_bible.style_string:
            result += f"\n\nStyle: {style_bible.style_string}"
        return result

    # ── Validation ────────────────────────────────────────────────────

    def validate(self, prompt: str, shot: Shot, characters: Sequence[CharacterRef],
                 style_bible: Optional[StyleBible] = None) -> PromptValidation:
        """
        Check a compiled prompt for problems before generation.

        Errors make the prompt invalid; warnings are advisory.
        """
        warnings = []
        errors = []

        if len(prompt) < int(self.settings['min_prompt_chars']):
            warnings.append("Prompt is very short, more detail produces better results")
        if len(prompt) > int(self.settings['max_prompt_chars']):
            warnings.append("Prompt is very long, the model may truncate or ignore parts")

        camera = f"{shot.camera_movement} {shot.camera_prompt}".lower()
        orbit_min = int(self.settings['orbit_min_seconds'])
        if ("orbit" in camera or "360" in camera) and shot.duration_seconds < orbit_min:
            errors.append(f"360 orbit requires minimum {orbit_min} seconds duration")

        if shot.duration_seconds > int(self.settings['artifact_risk_seconds']):
            warnings.append(
                f"Shots over {self.settings['artifact_risk_seconds']} seconds have higher artifact risk"
            )

        referenced = [
            c for c in characters
            if _name_spans(prompt, c.name) or has_anchor(prompt, "@" + element_name_for(c.name))
        ]
        coverage = bool(referenced) or not characters
        if characters and not referenced:
            warnings.append("No characters referenced: is this an establishing shot?")

        untagged = [
            c.name for c in characters
            if c.has_reference_images and not has_anchor(prompt, "@" + element_name_for(c.name))
        ]
        if untagged:
            warnings.append(
                f"Characters with face references not tagged in prompt: {', '.join(untagged)}. "
                "Element binding may not activate."
            )

        has_style = style_bible is not None and bool(style_bible.style_string)
        if not has_style:
            warnings.append("No style bible applied, visual consistency may vary")

        if errors:
            quality = "low"
        elif len(prompt) > 100 and not warnings and has_style:
            quality = "high"
        else:
            quality = "medium"

        return PromptValidation(
            is_valid=not errors,
            warnings=warnings,
            errors=errors,
            character_coverage=coverage,
            estimated_quality=quality,
        )


# ── Convenience functions ─────────────────────────────────────────────

def _default_assembler() -> PromptAssembler:
    return PromptAssembler()


def assemble_prompt(shot: Shot, characters: Sequence[CharacterRef],
                    style_bible: Optional[StyleBible] = None,
                    voice_profiles: Optional[Dict[str, VoiceProfile]] = None) -> str:
    return _default_assembler().assemble(shot, characters, style_bible, voice_profiles)


def build_subject_block(subject: str, characters: Sequence[CharacterRef]) -> str:
    return _default_assembler().build_subject_block(subject, characters)


def format_dialogue(dialogue: Optional[ShotDialogue],
                    voice_profile: Optional[VoiceProfile] = None) -> str:
    return PromptAssembler.format_dialogue(dialogue, voice_profile)


def enrich_action_for_duration(action: str, duration_seconds: int) -> str:
    return PromptAssembler.enrich_action(action, duration_seconds)


def format_negative_prompt(style_bible: Optional[StyleBible] = None,
                           extra: Optional[Sequence[str]] = None) -> str:
    return _default_assembler().format_negative_prompt(style_bible, extra)


def assemble_multi_shot_prompt(shots: Sequence[Shot], characters: Sequence[CharacterRef],
                               style_bible: Optional[StyleBible] = None) -> str:
    return _default_assembler().assemble_multi_shot(shots, characters, style_bible)


def validate_prompt(prompt: str, shot: Shot, characters: Sequence[CharacterRef],
                    style_bible: Optional[StyleBible] = None) -> PromptValidation:
    return _default_assembler().validate(prompt, shot, characters, style_bible)
