"""
Shot Planner - Turns a script analysis into an ordered shot list

Each narrative beat becomes exactly one shot. The planner decides:
- Camera movement (forced establishing opener, dialogue bias, tone mapping,
  genre weighting and anti-repetition)
- Shot type and duration
- Subject, environment, lighting and dialogue binding
- The compiled prompt and negative prompt for every shot
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from ..catalog.camera_movements import CameraMovement, camera_movement_index
from ..catalog.genre_presets import GenrePreset, StyleBible
from ..catalog.loader import load_section
from ..catalog.tones import tone_duration_bias, tone_profile
from .models import CharacterRef, ScriptAnalysis, ScriptBeat, Shot, ShotDialogue
from .prompt_assembler import PromptAssembler

logger = logging.getLogger(__name__)

RandomSource = Union[None, int, np.random.Generator]


class ShotPlanner:
    """
    Maps script beats to camera-directed shots.

    Movement selection is a weighted random draw over an ordered candidate
    list: the first three candidates get fixed rank weights and the rest
    share the tail weight. Genre-preferred ids are boosted and the most
    recent movements are excluded whenever an alternative exists.

    Usage:
        planner = ShotPlanner(rng=42)
        shots = planner.plan(analysis, characters, style_bible, genre_preset)
    """

    # Opening shot of the whole film is always drawn from these
    ESTABLISHING_MOVEMENTS = ("static-wide", "crane-up-reveal", "aerial-drone", "slow-dolly-forward")

    DIALOGUE_MOVEMENTS = ("ots-dialogue", "shot-reverse-shot", "static-medium", "static-close-up")

    FALLBACK_MOVEMENT = "static-medium"

    SHOT_TYPES_BY_CATEGORY = {
        'establishing': ("wide", "wide", "aerial"),
        'character': ("medium", "close-up", "medium"),
        'action': ("medium", "wide", "close-up"),
        'transition': ("medium", "wide", "close-up"),
    }

    TIME_OF_DAY_LIGHTING = {
        'morning': "soft golden morning light, warm tones",
        'afternoon': "bright natural daylight, clean shadows",
        'evening': "warm golden hour light, long shadows",
        'night': "moonlight and practical light sources, deep shadows",
    }

    DEFAULT_LIGHTING = "natural lighting"

    DEFAULTS = {
        'default_shot_duration': 5,
        'min_shot_duration': 3,
        'standard_cap': 10,
        'long_move_cap': 12,
        'long_move_threshold': 10,
        'dialogue_bias': 0.85,
        'genre_boost': 1.5,
        'rank_weights': [0.40, 0.25, 0.20],
        'tail_weight': 0.15,
        'recent_window': 2,
    }

    def __init__(self, config_dir: Optional[Path] = None, rng: RandomSource = None,
                 assembler: Optional[PromptAssembler] = None):
        """
        Initialize the shot planner.

        Args:
            config_dir: Path to configuration directory
            rng: None for a fresh unseeded generator, an int seed, or a
                numpy Generator shared with the caller
            assembler: Prompt assembler used for each shot's compiled prompt
        """
        self.config_dir = config_dir
        self.settings = dict(self.DEFAULTS)
        self.settings.update(load_section('shot_planning', config_dir))
        self.rng = np.random.default_rng(rng)
        self.assembler = assembler or PromptAssembler(config_dir)
        self.movements: Dict[str, CameraMovement] = camera_movement_index(config_dir)

    # ── Public API ────────────────────────────────────────────────────

    def plan(self, analysis: ScriptAnalysis, characters: Sequence[CharacterRef] = (),
             style_bible: Optional[StyleBible] = None,
             genre_preset: Optional[GenrePreset] = None) -> List[Shot]:
        """
        Plan one shot per beat, in scene then beat order.

        Args:
            analysis: Structured script
            characters: Production roster (may be empty)
            style_bible: Optional style bible used for the compiled prompts
            genre_preset: Optional genre preset biasing movement, duration
                and lighting choices

        Returns:
            Shots with a dense, globally sequential order
        """
        characters = list(characters or [])
        if genre_preset is None:
            logger.debug("No genre preset, using default durations and lighting")

        shots: List[Shot] = []
        recent: List[str] = []
        window = int(self.settings['recent_window'])

        for scene_index, scene in enumerate(analysis.scenes):
            for beat_index, beat in enumerate(scene.beats):
                opening = scene_index == 0 and beat_index == 0
                movement_id = self.choose_movement(beat, recent, genre_preset, opening)

                recent.append(movement_id)
                if len(recent) > window:
                    recent.pop(0)

                movement = self.movements.get(movement_id)
                category = movement.category if movement else "character"
                shot_type = self._pick(self.SHOT_TYPES_BY_CATEGORY.get(category, ("medium",)))
                duration = self.shot_duration(movement, beat.emotional_tone, genre_preset)

                shot = Shot(
                    scene_index=scene_index,
                    order=len(shots),
                    shot_type=shot_type,
                    camera_movement=movement_id,
                    subject=self.build_subject(beat, scene.location, characters),
                    action=beat.description,
                    environment=self.build_environment(scene.location, scene.time_of_day),
                    lighting=self.pick_lighting(genre_preset, scene.time_of_day),
                    duration_seconds=duration,
                    dialogue=self.bind_dialogue(beat, characters),
                    camera_prompt=movement.prompt_syntax if movement else movement_id,
                )
                shot.generated_prompt = self.assembler.assemble(shot, characters, style_bible)
                shot.negative_prompt = self.assembler.format_negative_prompt(style_bible)

                logger.debug(
                    "Shot %d (scene %d, beat %d): %s, %s, %ds",
                    shot.order, scene_index, beat_index, movement_id, shot_type, duration,
                )
                shots.append(shot)

        logger.info("Planned %d shots across %d scenes", len(shots), len(analysis.scenes))
        return shots

    # ── Camera movement ──────────────────────────────────────────────

    def choose_movement(self, beat: ScriptBeat, recent: Sequence[str],
                        genre_preset: Optional[GenrePreset] = None,
                        opening: bool = False) -> str:
        """Pick the movement id for one beat."""
        if opening:
            return self.pick_weighted(self.ESTABLISHING_MOVEMENTS, (), genre_preset)

        if beat.has_dialogue and self.rng.random() < float(self.settings['dialogue_bias']):
            return self.pick_weighted(self.DIALOGUE_MOVEMENTS, recent, genre_preset)

        return self.pick_weighted(self.tone_candidates(beat.emotional_tone, genre_preset),
                                  recent, genre_preset)

    def tone_candidates(self, tone: str, genre_preset: Optional[GenrePreset] = None) -> List[str]:
        """
        Ordered candidates for a tone: its preferred movements, then the
        genre's preferences, then every movement in the tone's category.
        """
        profile = tone_profile(tone)
        candidates = list(profile.preferred)

        if genre_preset is not None:
            for movement_id in genre_preset.camera_preferences:
                if movement_id not in candidates:
                    candidates.append(movement_id)

        for movement in self.movements.values():
            if movement.category == profile.category and movement.id not in candidates:
                candidates.append(movement.id)
        return candidates

    def movement_weights(self, pool: Sequence[str],
                         genre_preset: Optional[GenrePreset] = None) -> np.ndarray:
        """Normalized draw probabilities for an ordered pool."""
        ranked = [float(w) for w in self.settings['rank_weights']]
        tail_count = max(1, len(pool) - len(ranked))
        tail = float(self.settings['tail_weight']) / tail_count

        weights = np.array([ranked[i] if i < len(ranked) else tail for i in range(len(pool))])
        if genre_preset is not None:
            preferred = set(genre_preset.camera_preferences)
            boost = float(self.settings['genre_boost'])
            weights = weights * np.array([boost if m in preferred else 1.0 for m in pool])
        return weights / weights.sum()

    def pick_weighted(self, candidates: Sequence[str], recent: Sequence[str],
                      genre_preset: Optional[GenrePreset] = None) -> str:
        """
        Weighted draw that skips recently used movements.

        When every candidate was used recently the full list is drawn from
        instead. Unknown ids are ignored; an empty pool yields the fallback
        movement.
        """
        pool = [c for c in candidates if c not in recent] or list(candidates)
        pool = [c for c in pool if c in self.movements]
        if not pool:
            logger.debug("No usable candidates, falling back to %s", self.FALLBACK_MOVEMENT)
            return self.FALLBACK_MOVEMENT

        index = self.rng.choice(len(pool), p=self.movement_weights(pool, genre_preset))
        return pool[int(index)]

    # ── Shot details ─────────────────────────────────────────────────

    def shot_duration(self, movement: Optional[CameraMovement], emotional_tone: str,
                      genre_preset: Optional[GenrePreset] = None) -> int:
        """
        Genre average (or default) plus tone bias, clamped to what the
        movement needs. Long moves such as a full orbit get the higher cap.
        """
        if genre_preset is not None:
            base = genre_preset.avg_shot_duration
        else:
            base = int(self.settings['default_shot_duration'])
        duration = round(base + tone_duration_bias(emotional_tone))

        min_duration = movement.min_duration if movement else 0
        floor = max(int(self.settings['min_shot_duration']), min_duration)
        if min_duration >= int(self.settings['long_move_threshold']):
            cap = int(self.settings['long_move_cap'])
        else:
            cap = int(self.settings['standard_cap'])
        cap = max(cap, floor)

        return max(floor, min(duration, cap))

    @staticmethod
    def resolve_character(name: str, characters: Sequence[CharacterRef]) -> Optional[CharacterRef]:
        """
        Match a speaker name to the roster: exact (case-insensitive) first,
        then any shared name part of at least three letters.
        """
        wanted = (name or "").strip().lower()
        if not wanted:
            return None

        for character in characters:
            if character.name.strip().lower() == wanted:
                return character

        wanted_parts = {p for p in wanted.split() if len(p) >= 3}
        for character in characters:
            parts = {p for p in character.name.lower().split() if len(p) >= 3}
            if parts & wanted_parts:
                return character
        return None

    def build_subject(self, beat: ScriptBeat, location: str,
                      characters: Sequence[CharacterRef]) -> str:
        """
        Characters named in the beat description ("Name, description" joined
        with " and "), else the dialogue speaker, else the bare location.
        """
        description = beat.description.lower()
        mentioned = [c for c in characters
                     if c.name.strip() and c.name.lower() in description]
        if mentioned:
            return " and ".join(f"{c.name}, {c.visual_description}" for c in mentioned)

        if beat.dialogue:
            speaker = self.resolve_character(beat.dialogue[0].character, characters)
            if speaker is not None:
                return f"{speaker.name}, {speaker.visual_description}"

        return location

    @staticmethod
    def build_environment(location: str, time_of_day: str) -> str:
        return ", ".join(p for p in (location, time_of_day) if p)

    def bind_dialogue(self, beat: ScriptBeat,
                      characters: Sequence[CharacterRef]) -> Optional[ShotDialogue]:
        """First line of the beat's dialogue, bound to a roster id when possible."""
        if not beat.dialogue:
            return None
        line = beat.dialogue[0]
        speaker = self.resolve_character(line.character, characters)
        if speaker is None:
            logger.debug("Speaker '%s' not found in roster", line.character)
        return ShotDialogue(
            character_id=speaker.id if speaker else "",
            character_name=line.character,
            line=line.line,
            emotion=line.emotion,
        )

    def pick_lighting(self, genre_preset: Optional[GenrePreset], time_of_day: str) -> str:
        """Two or three genre lighting keywords, else a time-of-day default."""
        keywords = list(genre_preset.lighting_keywords) if genre_preset else []
        if not keywords:
            key = (time_of_day or "").strip().lower()
            return self.TIME_OF_DAY_LIGHTING.get(key, self.DEFAULT_LIGHTING)

        shuffled = [keywords[i] for i in self.rng.permutation(len(keywords))]
        count = 2 + int(self.rng.integers(2))
        return ", ".join(shuffled[:count])

    def _pick(self, options: Sequence[str]) -> str:
        return options[int(self.rng.integers(len(options)))]


def plan_shots(analysis: ScriptAnalysis, characters: Sequence[CharacterRef] = (),
               style_bible: Optional[StyleBible] = None,
               genre_preset: Optional[GenrePreset] = None,
               rng: RandomSource = None,
               config_dir: Optional[Path] = None) -> List[Shot]:
    """
    Plan a shot list in one call.

    Args:
        analysis: Structured script
        characters: Production roster
        style_bible: Optional style bible
        genre_preset: Optional genre preset
        rng: Seed or numpy Generator for reproducible plans
        config_dir: Optional configs directory override

    Returns:
        One Shot per beat
    """
    planner = ShotPlanner(config_dir=config_dir, rng=rng)
    return planner.plan(analysis, characters, style_bible, genre_preset)
