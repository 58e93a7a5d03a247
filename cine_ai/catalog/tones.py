"""
Emotional tone table

Maps a beat's emotional tone to the camera category that suits it, an
ordered list of preferred movements, and a duration bias in seconds.
Unknown tones resolve to the "dramatic" profile for camera choice and to a
zero bias for timing.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class ToneProfile:
    category: str
    preferred: Tuple[str, ...]
    duration_bias: int


FALLBACK_TONE = "dramatic"

TONE_PROFILES: Mapping[str, ToneProfile] = MappingProxyType({
    'tense':       ToneProfile('character',    ('dolly-push-in', 'static-close-up', 'handheld'), 1),
    'melancholic': ToneProfile('character',    ('static-close-up', 'slow-dolly-forward', 'rack-focus'), 2),
    'hopeful':     ToneProfile('establishing', ('crane-up-reveal', 'pull-out-reveal', 'tilt-up'), 0),
    'exciting':    ToneProfile('action',       ('tracking-follow', 'speed-ramp', 'chase-cam'), -1),
    'mysterious':  ToneProfile('transition',   ('pan-reveal', 'slow-dolly-forward', 'rack-focus'), 1),
    'dramatic':    ToneProfile('character',    ('dolly-push-in', 'low-angle', 'dutch-angle'), 1),
    'peaceful':    ToneProfile('establishing', ('static-wide', 'aerial-drone', 'crane-down'), 2),
    'fearful':     ToneProfile('action',       ('handheld', 'dutch-angle', 'fpv-first-person'), 0),
    'angry':       ToneProfile('action',       ('handheld', 'low-angle-tracking', 'crash-zoom'), -1),
    'sad':         ToneProfile('character',    ('static-close-up', 'pull-out-reveal', 'dolly-push-in'), 2),
    'romantic':    ToneProfile('character',    ('dolly-push-in', 'orbit-360', 'rack-focus'), 1),
    'suspenseful': ToneProfile('transition',   ('slow-dolly-forward', 'pan-reveal', 'rack-focus'), 1),
    'triumphant':  ToneProfile('character',    ('low-angle', 'crane-up-reveal', 'orbit-360'), 0),
    'chaotic':     ToneProfile('action',       ('handheld', 'whip-pan', 'chase-cam'), -1),
    'reflective':  ToneProfile('character',    ('static-medium', 'rack-focus', 'dolly-push-in'), 2),
    'ominous':     ToneProfile('transition',   ('slow-dolly-forward', 'tilt-down', 'dutch-angle'), 1),
})


def normalize_tone(tone) -> str:
    return str(tone or "").strip().lower()


def tone_profile(tone) -> ToneProfile:
    """Profile for a tone, falling back to the dramatic profile."""
    return TONE_PROFILES.get(normalize_tone(tone), TONE_PROFILES[FALLBACK_TONE])


def tone_duration_bias(tone) -> int:
    """Duration bias in seconds; 0 for unknown tones."""
    profile = TONE_PROFILES.get(normalize_tone(tone))
    return profile.duration_bias if profile else 0
