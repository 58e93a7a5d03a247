"""
Cine AI Main Package
Shot planning and prompt assembly for AI-generated short films
"""

__version__ = "0.1.0"
__author__ = "Cine AI Project"

from .catalog import (
    CatalogError,
    GenrePreset,
    StyleBible,
    get_camera_movement,
    get_genre_preset,
    list_camera_movements,
    list_genre_presets,
)
from .agent import (
    CharacterRef,
    ScriptAnalysis,
    Shot,
    ShotPlanner,
    PromptAssembler,
    analyze_duration,
    assemble_prompt,
    plan_shots,
    validate_prompt,
)

__all__ = [
    'CatalogError',
    'GenrePreset',
    'StyleBible',
    'get_camera_movement',
    'get_genre_preset',
    'list_camera_movements',
    'list_genre_presets',
    'CharacterRef',
    'ScriptAnalysis',
    'Shot',
    'ShotPlanner',
    'PromptAssembler',
    'analyze_duration',
    'assemble_prompt',
    'plan_shots',
    'validate_prompt',
]
