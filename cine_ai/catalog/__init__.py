"""
Cine AI Catalogs
Static reference data: camera movements, genre presets, emotional tones
"""

from .loader import CatalogError, load_defaults, load_section, clear_caches
from .camera_movements import (
    CATEGORIES,
    CameraMovement,
    camera_movement_index,
    get_camera_movement,
    list_camera_movements,
    movements_by_category,
)
from .genre_presets import GenrePreset, StyleBible, get_genre_preset, list_genre_presets
from .tones import TONE_PROFILES, ToneProfile, tone_duration_bias, tone_profile

__all__ = [
    'CatalogError',
    'load_defaults',
    'load_section',
    'clear_caches',
    'CATEGORIES',
    'CameraMovement',
    'camera_movement_index',
    'get_camera_movement',
    'list_camera_movements',
    'movements_by_category',
    'GenrePreset',
    'StyleBible',
    'get_genre_preset',
    'list_genre_presets',
    'TONE_PROFILES',
    'ToneProfile',
    'tone_duration_bias',
    'tone_profile',
]
