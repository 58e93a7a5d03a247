"""
Scene Reference Tests
=====================
Angle selection and prompt content for scene reference packs.

Run:
    python -m pytest test_scene_reference.py -v --tb=short
"""

from cine_ai.agent.models import ScriptScene
from cine_ai.agent.scene_reference import (
    NO_PEOPLE,
    plan_scene_reference,
    scene_element_name,
    scene_reference_image_count,
)


def _scene(location, time_of_day="day"):
    return ScriptScene(title="Scene", location=location, time_of_day=time_of_day)


class TestAngles:

    def test_daytime_scene_gets_three_angles(self):
        plan = plan_scene_reference(0, _scene("Sunny beach boardwalk"))
        assert [i.angle for i in plan.images] == ["wide", "medium", "detail"]

    def test_night_scene_adds_atmospheric(self):
        plan = plan_scene_reference(0, _scene("Dimly lit speakeasy", "night"))
        assert [i.angle for i in plan.images] == ["wide", "medium", "detail", "atmospheric"]

    def test_atmosphere_from_location(self):
        assert scene_reference_image_count(_scene("Foggy harbor", "afternoon")) == 4
        assert scene_reference_image_count(_scene("Office lobby", "Morning")) == 3
        assert scene_reference_image_count(_scene("Rooftop", "DUSK")) == 4

    def test_element_name(self):
        plan = plan_scene_reference(3, _scene("Rooftop"))
        assert plan.element_name == "element_scene_3"
        assert scene_element_name(0) == "element_scene_0"


class TestPrompts:

    def test_prompt_content(self, noir_bible):
        plan = plan_scene_reference(0, _scene("Dimly lit speakeasy", "night"), noir_bible)
        wide = plan.images[0].prompt
        assert wide.startswith("Wide establishing shot showing the full location. Dimly lit speakeasy, night.")
        assert NO_PEOPLE in wide
        assert wide.endswith(noir_bible.style_string)
        for image in plan.images:
            assert NO_PEOPLE in image.prompt
            assert ".." not in image.prompt

    def test_environment_details_deduplicated_and_limited(self):
        environments = ["Rain on the windows", "Rain on the windows", "", "Neon sign outside",
                        "Jukebox in the corner"]
        plan = plan_scene_reference(1, _scene("Speakeasy", "night"), shot_environments=environments)
        prompt = plan.images[0].prompt
        assert prompt.count("Rain on the windows") == 1
        assert "Neon sign outside" in prompt
        assert "Jukebox" not in prompt

    def test_without_style_bible(self):
        plan = plan_scene_reference(0, _scene("Office lobby"))
        assert plan.images[0].prompt.endswith(NO_PEOPLE)

    def test_missing_time_of_day(self):
        prompt = plan_scene_reference(0, _scene("Office lobby", "")).images[0].prompt
        assert "Office lobby." in prompt
        assert "lobby, ." not in prompt

    def test_to_dict(self):
        d = plan_scene_reference(2, _scene("Rooftop")).to_dict()
        assert d["sceneIndex"] == 2
        assert d["elementName"] == "element_scene_2"
        assert d["images"][0]["angle"] == "wide"
