"""
Catalog Tests
=============
Integrity of the camera movement, genre preset and tone tables, plus the
load-time checks that reject broken catalog files.

Run:
    python -m pytest test_catalogs.py -v --tb=short
"""

import shutil
from pathlib import Path

import pytest
import yaml

from cine_ai.catalog import (
    CATEGORIES,
    TONE_PROFILES,
    CatalogError,
    get_camera_movement,
    get_genre_preset,
    list_camera_movements,
    list_genre_presets,
    movements_by_category,
    tone_duration_bias,
    tone_profile,
)
from cine_ai.agent.prompt_assembler import format_negative_prompt
from cine_ai.catalog import loader
from cine_ai.catalog.loader import DEFAULT_CONFIG_DIR, clear_caches, load_section


@pytest.fixture
def config_copy(tmp_path):
    """Writable copy of the packaged configs directory."""
    target = tmp_path / "configs"
    shutil.copytree(DEFAULT_CONFIG_DIR, target)
    return target


def _edit_yaml(path: Path, edit):
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    edit(data)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


class TestCameraMovements:

    def test_catalog_size(self):
        assert len(list_camera_movements()) == 40

    def test_ids_unique(self):
        ids = [m.id for m in list_camera_movements()]
        assert len(ids) == len(set(ids))

    def test_every_category_populated(self):
        for category in CATEGORIES:
            assert len(movements_by_category(category)) > 0, category

    def test_required_fields(self):
        for m in list_camera_movements():
            assert m.name and m.description and m.best_for and m.prompt_syntax
            assert m.min_duration >= 1
            assert len(m.example_prompt) >= 50, m.id

    def test_static_movements_are_short(self):
        for m in list_camera_movements():
            if m.id.startswith("static"):
                assert m.min_duration <= 5, m.id

    def test_orbit_needs_ten_seconds(self):
        orbit = get_camera_movement("orbit-360")
        assert orbit is not None
        assert orbit.category == "character"
        assert orbit.min_duration == 10

    def test_lookup_unknown(self):
        assert get_camera_movement("not-a-move") is None
        assert movements_by_category("unknown") == ()

    def test_to_dict_uses_camel_case(self):
        d = get_camera_movement("dolly-push-in").to_dict()
        assert d["promptSyntax"] == "Slow dolly push-in from medium shot to close-up"
        assert d["minDuration"] == 5
        assert "bestFor" in d and "examplePrompt" in d


class TestGenrePresets:

    def test_five_presets(self):
        ids = {p.id for p in list_genre_presets()}
        assert ids == {"noir", "scifi", "horror", "commercial", "documentary"}

    def test_preferences_reference_real_movements(self):
        for preset in list_genre_presets():
            for movement_id in preset.camera_preferences:
                assert get_camera_movement(movement_id) is not None, (preset.id, movement_id)

    def test_style_strings_end_with_resolution(self):
        for preset in list_genre_presets():
            assert preset.style_bible.style_string.endswith("4K."), preset.id

    def test_avg_duration_and_pacing(self):
        for preset in list_genre_presets():
            assert 3 <= preset.avg_shot_duration <= 10
            assert preset.pacing in ("slow", "medium", "fast")

    def test_noir_and_horror_are_slow(self):
        assert get_genre_preset("noir").pacing == "slow"
        assert get_genre_preset("horror").pacing == "slow"

    def test_lighting_keywords(self):
        for preset in list_genre_presets():
            assert len(preset.lighting_keywords) >= 3

    def test_unknown_preset(self):
        assert get_genre_preset("western") is None


class TestTones:

    def test_known_tone(self):
        profile = tone_profile("Dramatic ")
        assert profile.category == "character"
        assert profile.preferred[0] == "dolly-push-in"

    def test_unknown_tone_falls_back_to_dramatic(self):
        assert tone_profile("bewildered") == TONE_PROFILES["dramatic"]
        assert tone_profile(None) == TONE_PROFILES["dramatic"]

    def test_duration_bias(self):
        assert tone_duration_bias("melancholic") == 2
        assert tone_duration_bias("exciting") == -1
        assert tone_duration_bias("bewildered") == 0
        assert tone_duration_bias("") == 0

    def test_preferred_movements_exist(self):
        for tone, profile in TONE_PROFILES.items():
            assert profile.category in CATEGORIES, tone
            for movement_id in profile.preferred:
                assert get_camera_movement(movement_id) is not None, (tone, movement_id)


class TestLoadTimeValidation:

    def test_duplicate_movement_id(self, config_copy):
        def edit(data):
            data["movements"][1]["id"] = data["movements"][0]["id"]
        _edit_yaml(config_copy / "camera_movements.yaml", edit)
        with pytest.raises(CatalogError, match="duplicate"):
            list_camera_movements(config_copy)

    def test_unknown_category(self, config_copy):
        def edit(data):
            data["movements"][0]["category"] = "montage"
        _edit_yaml(config_copy / "camera_movements.yaml", edit)
        with pytest.raises(CatalogError, match="category"):
            list_camera_movements(config_copy)

    def test_min_duration_below_one(self, config_copy):
        def edit(data):
            data["movements"][0]["min_duration"] = 0
        _edit_yaml(config_copy / "camera_movements.yaml", edit)
        with pytest.raises(CatalogError, match="min_duration"):
            list_camera_movements(config_copy)

    def test_missing_field(self, config_copy):
        def edit(data):
            del data["movements"][0]["prompt_syntax"]
        _edit_yaml(config_copy / "camera_movements.yaml", edit)
        with pytest.raises(CatalogError, match="prompt_syntax"):
            list_camera_movements(config_copy)

    def test_genre_references_unknown_movement(self, config_copy):
        def edit(data):
            data["presets"][0]["camera_preferences"].append("teleport-cam")
        _edit_yaml(config_copy / "genre_presets.yaml", edit)
        with pytest.raises(CatalogError, match="teleport-cam"):
            list_genre_presets(config_copy)

    def test_avg_duration_out_of_range(self, config_copy):
        def edit(data):
            data["presets"][0]["avg_shot_duration"] = 15
        _edit_yaml(config_copy / "genre_presets.yaml", edit)
        with pytest.raises(CatalogError, match="avg_shot_duration"):
            list_genre_presets(config_copy)

    def test_unknown_pacing(self, config_copy):
        def edit(data):
            data["presets"][0]["pacing"] = "moderate"
        _edit_yaml(config_copy / "genre_presets.yaml", edit)
        with pytest.raises(CatalogError, match="pacing"):
            list_genre_presets(config_copy)

    def test_catalog_error_is_value_error(self):
        assert issubclass(CatalogError, ValueError)


class TestDefaults:

    def test_packaged_sections(self):
        assert load_section("shot_planning")["dialogue_bias"] == 0.85
        assert load_section("duration_analysis")["fit_band"] == 0.15
        assert "glitch" in load_section("prompt_assembly")["universal_negatives"]

    def test_missing_defaults_file(self, tmp_path):
        assert load_section("shot_planning", tmp_path) == {}


class TestClearCaches:

    @pytest.fixture
    def packaged_copy(self, config_copy, monkeypatch):
        monkeypatch.setattr(loader, "DEFAULT_CONFIG_DIR", config_copy)
        yield config_copy
        clear_caches()

    def test_edited_tunables_picked_up(self, packaged_copy):
        assert format_negative_prompt().endswith("glitch")

        def edit(data):
            data["prompt_assembly"]["universal_negatives"].append("lens flare")
        _edit_yaml(packaged_copy / "defaults.yaml", edit)

        assert format_negative_prompt().endswith("glitch")
        clear_caches()
        assert format_negative_prompt().endswith("glitch, lens flare")

    def test_edited_catalog_picked_up(self, packaged_copy):
        assert get_camera_movement("orbit-360").min_duration == 10

        def edit(data):
            for entry in data["movements"]:
                if entry["id"] == "orbit-360":
                    entry["min_duration"] = 11
        _edit_yaml(packaged_copy / "camera_movements.yaml", edit)

        clear_caches()
        assert get_camera_movement("orbit-360").min_duration == 11
