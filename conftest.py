"""
Shared fixtures for the Cine AI test suite.

Run:
    python -m pytest -v --tb=short
"""

import os
import sys

# Ensure the repo root is on sys.path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import pytest

from cine_ai.agent.models import CharacterRef, ScriptAnalysis
from cine_ai.catalog import StyleBible


ANALYSIS_DATA = {
    "synopsis": "A detective meets an informant in a rain-soaked city.",
    "genre": "noir",
    "suggestedDuration": 30,
    "scenes": [
        {
            "title": "The Bar",
            "location": "Dimly lit speakeasy",
            "timeOfDay": "night",
            "beats": [
                {"description": "Rain streaks the windows of an empty bar", "emotionalTone": "mysterious"},
                {"description": "Marcus sits alone nursing a whiskey", "emotionalTone": "melancholic"},
            ],
        },
        {
            "title": "The Meeting",
            "location": "Back alley",
            "timeOfDay": "night",
            "beats": [
                {"description": "Elena steps out of the shadows", "emotionalTone": "tense"},
                {
                    "description": "She hands him an envelope",
                    "emotionalTone": "suspenseful",
                    "dialogue": [
                        {"character": "Elena", "line": "You didn't get this from me.", "emotion": "nervous"}
                    ],
                },
            ],
        },
    ],
    "characters": [
        {"name": "Marcus", "role": "protagonist",
         "suggestedVisualDescription": "A weathered man in his 50s"},
        {"name": "Elena", "role": "supporting",
         "suggestedVisualDescription": "A young woman with a red scarf"},
    ],
    "styleSuggestions": {
        "genre": "noir",
        "filmStock": "35mm",
        "colorPalette": "teal",
        "textures": ["grain"],
        "negativePrompt": "bright colors",
    },
    "estimatedShots": 4,
    "estimatedCredits": 120,
}


def make_analysis(scenes):
    """Build an analysis from a list of scene dicts."""
    return ScriptAnalysis.from_dict({"synopsis": "", "genre": "", "scenes": scenes})


def make_beats(count, tone="neutral", dialogue=False):
    beats = []
    for i in range(count):
        beat = {"description": f"Beat {i + 1} happens", "emotionalTone": tone}
        if dialogue:
            beat["dialogue"] = [{"character": "Marcus", "line": f"Line {i + 1}", "emotion": "calm"}]
        beats.append(beat)
    return beats


@pytest.fixture
def analysis():
    return ScriptAnalysis.from_dict(ANALYSIS_DATA)


@pytest.fixture
def characters():
    return [
        CharacterRef(
            id="char-1",
            name="Marcus",
            role="protagonist",
            visual_description="A weathered man in his 50s with a gray trenchcoat and stubble",
            has_reference_images=True,
        ),
        CharacterRef(
            id="char-2",
            name="Elena",
            role="supporting",
            visual_description="A young woman with dark hair, red scarf, and intense eyes",
            has_reference_images=False,
        ),
    ]


@pytest.fixture
def noir_bible():
    return StyleBible(
        film_stock="35mm",
        color_palette="desaturated teal",
        textures=("heavy grain",),
        negative_prompt="bright colors, cartoon",
        style_string="Desaturated teal grade, crushed blacks, shot on 35mm film, heavy grain. 4K.",
    )
