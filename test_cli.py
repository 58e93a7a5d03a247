"""
CLI Tests
=========
Exercises each sub-command through main() with temporary input files.

Run:
    python -m pytest test_cli.py -v --tb=short
"""

import json

import pytest

from cine_ai.cli import InputError, build_parser, load_analysis, load_characters, main
from conftest import ANALYSIS_DATA

CAST = [
    {"id": "char-1", "name": "Marcus", "role": "protagonist",
     "visualDescription": "A weathered man in his 50s", "hasReferenceImages": True},
    {"id": "char-2", "name": "Elena", "role": "supporting",
     "visualDescription": "A young woman with a red scarf", "referenceImages": []},
]


@pytest.fixture
def analysis_file(tmp_path):
    path = tmp_path / "analysis.json"
    path.write_text(json.dumps(ANALYSIS_DATA), encoding="utf-8")
    return str(path)


@pytest.fixture
def cast_file(tmp_path):
    path = tmp_path / "cast.json"
    path.write_text(json.dumps({"characters": CAST}), encoding="utf-8")
    return str(path)


class TestLoaders:

    def test_plain_json(self, analysis_file):
        assert load_analysis(analysis_file).beat_count == 4

    def test_fenced_response(self, tmp_path):
        path = tmp_path / "response.md"
        path.write_text(f"Here you go.\n```json\n{json.dumps(ANALYSIS_DATA)}\n```\n", encoding="utf-8")
        assert len(load_analysis(str(path)).scenes) == 2

    def test_bad_fenced_response(self, tmp_path):
        path = tmp_path / "response.md"
        path.write_text("```json\n{oops}\n```", encoding="utf-8")
        with pytest.raises(InputError, match="valid analysis"):
            load_analysis(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError, match="Cannot read"):
            load_analysis(str(tmp_path / "nope.json"))

    def test_characters_dict_or_list(self, tmp_path, cast_file):
        as_list = tmp_path / "list.json"
        as_list.write_text(json.dumps(CAST), encoding="utf-8")
        for path in (cast_file, str(as_list)):
            characters = load_characters(path)
            assert [c.name for c in characters] == ["Marcus", "Elena"]
            assert [c.has_reference_images for c in characters] == [True, False]

    def test_no_characters(self):
        assert load_characters(None) == []


class TestCommands:

    def test_movements_by_category(self, capsys):
        assert main(["movements", "--category", "establishing", "--json"]) == 0
        movements = json.loads(capsys.readouterr().out)
        assert movements
        assert {m["category"] for m in movements} == {"establishing"}

    def test_movements_text(self, capsys):
        assert main(["movements"]) == 0
        out = capsys.readouterr().out
        assert "ESTABLISHING" in out
        assert "orbit-360" in out

    def test_genres(self, capsys):
        assert main(["genres", "--json"]) == 0
        assert len(json.loads(capsys.readouterr().out)) == 5

    def test_analyze(self, capsys, analysis_file):
        assert main(["analyze", analysis_file, "--target", "27", "--json"]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["optimalDuration"] == 27
        assert result["fitScore"] == 100

    def test_analyze_text(self, capsys, analysis_file):
        assert main(["analyze", analysis_file, "-t", "90"]) == 0
        out = capsys.readouterr().out
        assert "Optimal duration: 27s" in out
        assert "adding more scenes" in out

    def test_plan_json(self, capsys, analysis_file, cast_file):
        code = main(["plan", analysis_file, "--characters", cast_file,
                     "--genre", "noir", "--seed", "7", "--scene-packs", "--json"])
        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        shots = payload["shots"]
        assert len(shots) == 4
        assert all(s["generatedPrompt"] and s["negativePrompt"] for s in shots)
        assert "@element_marcus" in shots[1]["generatedPrompt"]
        assert shots[3]["dialogue"]["characterId"] == "char-2"
        assert [p["elementName"] for p in payload["scenePacks"]] == ["element_scene_0", "element_scene_1"]

    def test_plan_is_reproducible(self, capsys, analysis_file):
        main(["plan", analysis_file, "--seed", "11", "--json"])
        first = capsys.readouterr().out
        main(["plan", analysis_file, "--seed", "11", "--json"])
        assert capsys.readouterr().out == first

    def test_plan_text(self, capsys, analysis_file):
        assert main(["plan", analysis_file, "--seed", "3"]) == 0
        out = capsys.readouterr().out
        assert "Shot 1 (scene 1" in out
        assert "4 shots" in out

    def test_unknown_genre(self, capsys, analysis_file):
        assert main(["plan", analysis_file, "--genre", "western"]) == 1
        assert "Unknown genre preset: western" in capsys.readouterr().err

    def test_invalid_json(self, capsys, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        assert main(["analyze", str(path), "--target", "30"]) == 1
        assert "not valid JSON" in capsys.readouterr().err

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    @pytest.mark.parametrize("target", ["inf", "nan"])
    def test_non_finite_target(self, capsys, analysis_file, target):
        assert main(["analyze", analysis_file, "--target", target]) == 1
        assert "finite number of seconds" in capsys.readouterr().err

    def test_non_utf8_analysis(self, capsys, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"synopsis": "caf\xe9"}')
        assert main(["analyze", str(path), "--target", "30"]) == 1
        assert "not UTF-8 text" in capsys.readouterr().err

    def test_non_utf8_characters(self, capsys, analysis_file, tmp_path):
        path = tmp_path / "cast.json"
        path.write_bytes(b"\xff\xfe[]")
        assert main(["plan", analysis_file, "--characters", str(path)]) == 1
        assert "not UTF-8 text" in capsys.readouterr().err
