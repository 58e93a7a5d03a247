"""
Duration Analyzer - How long does this story want to be?

Estimates the natural running time of a script from its beat structure and
scores how well a requested target duration fits it.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..catalog.loader import load_section
from ..catalog.tones import tone_duration_bias
from .models import ScriptAnalysis

logger = logging.getLogger(__name__)


@dataclass
class SceneDuration:
    """Estimated time for one scene"""
    scene_index: int
    beats: int
    has_dialogue: bool
    seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sceneIndex": self.scene_index,
            "beats": self.beats,
            "hasDialogue": self.has_dialogue,
            "seconds": self.seconds,
        }


@dataclass
class DurationAnalysis:
    """Result of analyzing a script against a target duration"""
    optimal_duration: int
    fit_score: int
    min_viable_duration: int
    max_comfort_duration: int
    breakdown: List[SceneDuration] = field(default_factory=list)
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "optimalDuration": self.optimal_duration,
            "fitScore": self.fit_score,
            "minViableDuration": self.min_viable_duration,
            "maxComfortDuration": self.max_comfort_duration,
            "breakdown": [b.to_dict() for b in self.breakdown],
            "suggestion": self.suggestion,
        }


def format_duration(seconds: int) -> str:
    """Human-readable duration: minutes from two minutes up, else seconds."""
    if seconds >= 120:
        return f"{round(seconds / 60)} minutes"
    return f"{seconds}s"


class DurationAnalyzer:
    """
    Scores a target duration against the duration a script implies.

    Every beat is worth a base time (longer for dialogue beats) plus the
    emotional tone's bias. Inside the fit band around the optimal duration
    the score is 100; outside it decays linearly to 0 at a 100% deviation.
    """

    DEFAULTS = {
        'visual_beat_seconds': 5,
        'dialogue_beat_seconds': 7,
        'fit_band': 0.15,
        'min_ratio': 0.6,
        'max_ratio': 1.4,
        'suggestion_threshold': 70,
    }

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the analyzer.

        Args:
            config_dir: Path to configuration directory
        """
        self.settings = dict(self.DEFAULTS)
        self.settings.update(load_section('duration_analysis', config_dir))

    def beat_seconds(self, has_dialogue: bool, emotional_tone: str) -> int:
        """Estimated seconds for a single beat."""
        key = 'dialogue_beat_seconds' if has_dialogue else 'visual_beat_seconds'
        return int(self.settings[key]) + tone_duration_bias(emotional_tone)

    def fit_score(self, optimal: int, target: float) -> int:
        """0-100 score of how well target matches optimal."""
        if not math.isfinite(target):
            return 0
        if optimal == 0:
            return 100 if target == 0 else 0

        band = float(self.settings['fit_band'])
        deviation = abs(target - optimal) / optimal
        if deviation <= band:
            return 100
        return max(0, round(100 * (1 - (deviation - band) / (1 - band))))

    def analyze(self, analysis: ScriptAnalysis, target_duration: float) -> DurationAnalysis:
        """
        Analyze a script against a requested duration.

        Args:
            analysis: Structured script
            target_duration: Requested running time in seconds

        Returns:
            DurationAnalysis with optimal duration, fit score, viable range,
            per-scene breakdown and (for poor fits) a suggestion
        """
        breakdown = []
        total = 0
        total_beats = 0
        dialogue_beats = 0

        for scene_index, scene in enumerate(analysis.scenes):
            scene_seconds = 0
            scene_has_dialogue = False
            for beat in scene.beats:
                if beat.has_dialogue:
                    scene_has_dialogue = True
                    dialogue_beats += 1
                scene_seconds += self.beat_seconds(beat.has_dialogue, beat.emotional_tone)

            total += scene_seconds
            total_beats += len(scene.beats)
            breakdown.append(SceneDuration(
                scene_index=scene_index,
                beats=len(scene.beats),
                has_dialogue=scene_has_dialogue,
                seconds=round(scene_seconds),
            ))

        optimal = round(total)
        score = self.fit_score(optimal, target_duration)

        suggestion = None
        if score < int(self.settings['suggestion_threshold']) and math.isfinite(target_duration):
            suggestion = self._suggest(optimal, target_duration, total_beats, dialogue_beats)

        logger.info(
            "Duration analysis: optimal %ds for target %ss (fit %d) across %d scenes",
            optimal, target_duration, score, len(breakdown),
        )

        return DurationAnalysis(
            optimal_duration=optimal,
            fit_score=score,
            min_viable_duration=round(total * float(self.settings['min_ratio'])),
            max_comfort_duration=round(total * float(self.settings['max_ratio'])),
            breakdown=breakdown,
            suggestion=suggestion,
        )

    def _suggest(self, optimal: int, target: float, beats: int, dialogue_beats: int) -> str:
        if beats == 0:
            return (f"Your story has no beats yet, so it naturally fits ~0s. "
                    f"Add scenes or beats to fill {_fmt_target(target)}s.")

        beat_info = f"{beats} beats"
        if dialogue_beats:
            beat_info += f" ({dialogue_beats} with dialogue)"
        opening = f"Your story has {beat_info}, so it naturally fits ~{optimal}s."

        if target < optimal:
            per_beat = int(self.settings['dialogue_beat_seconds'])
            trim = max(1, round((optimal - target) / per_beat))
            return (f"{opening} Consider trimming {trim} scene beats "
                    f"or extending to {format_duration(optimal)}.")
        return (f"{opening} Consider adding more scenes or beats to fill "
                f"{_fmt_target(target)}s, or reducing the target.")


def _fmt_target(target: float) -> str:
    return str(int(target)) if float(target).is_integer() else str(target)


def analyze_duration(analysis: ScriptAnalysis, target_duration: float,
                     config_dir: Optional[Path] = None) -> DurationAnalysis:
    """Convenience wrapper around DurationAnalyzer.analyze."""
    return DurationAnalyzer(config_dir).analyze(analysis, target_duration)
