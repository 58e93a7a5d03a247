"""
Cine AI Agent Package
Plans shot lists from script analyses and compiles generation prompts
"""

from .models import (
    CharacterRef,
    DialogueLine,
    PromptValidation,
    ScriptAnalysis,
    ScriptBeat,
    ScriptScene,
    Shot,
    ShotDialogue,
    VoiceProfile,
)
from .duration_analyzer import DurationAnalysis, DurationAnalyzer, analyze_duration
from .prompt_assembler import (
    PromptAssembler,
    assemble_multi_shot_prompt,
    assemble_prompt,
    build_subject_block,
    enrich_action_for_duration,
    format_dialogue,
    format_negative_prompt,
    validate_prompt,
)
from .shot_planner import ShotPlanner, plan_shots
from .scene_reference import ScenePackPlan, plan_scene_reference, scene_reference_image_count
from .script_parser import parse_director_response

__all__ = [
    'CharacterRef',
    'DialogueLine',
    'PromptValidation',
    'ScriptAnalysis',
    'ScriptBeat',
    'ScriptScene',
    'Shot',
    'ShotDialogue',
    'VoiceProfile',
    'DurationAnalysis',
    'DurationAnalyzer',
    'analyze_duration',
    'PromptAssembler',
    'assemble_multi_shot_prompt',
    'assemble_prompt',
    'build_subject_block',
    'enrich_action_for_duration',
    'format_dialogue',
    'format_negative_prompt',
    'validate_prompt',
    'ShotPlanner',
    'plan_shots',
    'ScenePackPlan',
    'plan_scene_reference',
    'scene_reference_image_count',
    'parse_director_response',
]
