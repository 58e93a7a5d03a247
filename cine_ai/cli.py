#!/usr/bin/env python3
"""
Cine AI - Command Line Interface

Browse the camera and genre catalogs, check a script's running time and
plan a shot list from a script analysis file.

Usage:
    cine-ai movements [--category establishing]
    cine-ai genres
    cine-ai analyze analysis.json --target 60
    cine-ai plan analysis.json --characters cast.json --genre noir --seed 7

The analysis file is either the analysis JSON itself or a full model
response with the analysis in a ```json fenced block.
"""

import sys
import json
import math
import argparse
import logging
from pathlib import Path
from typing import Any, List, Optional

from .agent.duration_analyzer import DurationAnalyzer
from .agent.models import CharacterRef, ScriptAnalysis
from .agent.prompt_assembler import PromptAssembler
from .agent.scene_reference import plan_scene_reference
from .agent.script_parser import JSON_BLOCK, parse_director_response
from .agent.shot_planner import ShotPlanner
from .catalog import CATEGORIES, get_genre_preset, list_camera_movements, list_genre_presets

logger = logging.getLogger(__name__)


class InputError(Exception):
    """An input file could not be read or understood."""


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure logging"""
    level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S',
        handlers=handlers
    )


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding='utf-8'))
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}")
    except UnicodeDecodeError as e:
        raise InputError(f"{path} is not UTF-8 text: {e}")
    except json.JSONDecodeError as e:
        raise InputError(f"{path} is not valid JSON: {e}")


def load_analysis(path: str) -> ScriptAnalysis:
    """Load an analysis from plain JSON or from a fenced model response."""
    try:
        text = Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}")
    except UnicodeDecodeError as e:
        raise InputError(f"{path} is not UTF-8 text: {e}")

    if JSON_BLOCK.search(text):
        _, analysis = parse_director_response(text)
        if analysis is None:
            raise InputError(f"{path}: the ```json block does not hold a valid analysis")
        return analysis

    try:
        return ScriptAnalysis.from_dict(json.loads(text))
    except json.JSONDecodeError as e:
        raise InputError(f"{path} is not valid JSON: {e}")
    except ValueError as e:
        raise InputError(f"{path}: {e}")


def load_characters(path: Optional[str]) -> List[CharacterRef]:
    if not path:
        return []
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("characters", [])
    try:
        return [CharacterRef.from_dict(entry) for entry in data]
    except (TypeError, ValueError) as e:
        raise InputError(f"{path}: {e}")


# ── Commands ─────────────────────────────────────────────────────────

def cmd_movements(args) -> int:
    movements = list_camera_movements()
    if args.category:
        movements = [m for m in movements if m.category == args.category]

    if args.json:
        print(json.dumps([m.to_dict() for m in movements], indent=2))
        return 0

    current = None
    for movement in movements:
        if movement.category != current:
            current = movement.category
            print(f"\n{current.upper()}")
        print(f"  {movement.id:<22} {movement.min_duration:>2}s+  {movement.name}")
    print()
    return 0


def cmd_genres(args) -> int:
    presets = list_genre_presets()
    if args.json:
        print(json.dumps([p.to_dict() for p in presets], indent=2))
        return 0

    for preset in presets:
        print(f"\n{preset.id} - {preset.name}")
        print(f"   Pacing: {preset.pacing}, ~{preset.avg_shot_duration}s per shot")
        print(f"   Cameras: {', '.join(preset.camera_preferences)}")
        print(f"   Style: {preset.style_bible.style_string}")
    print()
    return 0


def cmd_analyze(args) -> int:
    if not math.isfinite(args.target):
        raise InputError(f"Target duration must be a finite number of seconds, got {args.target}")
    analysis = load_analysis(args.analysis)
    result = DurationAnalyzer().analyze(analysis, args.target)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(f"\nOptimal duration: {result.optimal_duration}s "
          f"(viable {result.min_viable_duration}-{result.max_comfort_duration}s)")
    print(f"Fit score for {args.target:g}s: {result.fit_score}/100")
    for scene in result.breakdown:
        dialogue = ", dialogue" if scene.has_dialogue else ""
        print(f"   Scene {scene.scene_index + 1}: {scene.beats} beats, {scene.seconds}s{dialogue}")
    if result.suggestion:
        print(f"\n{result.suggestion}")
    print()
    return 0


def cmd_plan(args) -> int:
    analysis = load_analysis(args.analysis)
    characters = load_characters(args.characters)

    preset = None
    if args.genre:
        preset = get_genre_preset(args.genre)
        if preset is None:
            raise InputError(f"Unknown genre preset: {args.genre}")
        logger.info("Using genre preset %s", preset.id)
    style_bible = preset.style_bible if preset else None

    assembler = PromptAssembler()
    planner = ShotPlanner(rng=args.seed, assembler=assembler)
    shots = planner.plan(analysis, characters, style_bible, preset)

    packs = []
    if args.scene_packs:
        for index, scene in enumerate(analysis.scenes):
            environments = [s.environment for s in shots if s.scene_index == index]
            packs.append(plan_scene_reference(index, scene, style_bible, environments))

    if args.json:
        payload = {"shots": [s.to_dict() for s in shots]}
        if args.scene_packs:
            payload["scenePacks"] = [p.to_dict() for p in packs]
        print(json.dumps(payload, indent=2))
        return 0

    for shot in shots:
        validation = assembler.validate(shot.generated_prompt, shot, characters, style_bible)
        print(f"\nShot {shot.order + 1} (scene {shot.scene_index + 1}, {shot.duration_seconds}s) "
              f"{shot.shot_type} / {shot.camera_movement} [{validation.estimated_quality}]")
        print(f"   {shot.generated_prompt}")
        for error in validation.errors:
            print(f"   ERROR: {error}")
        for warning in validation.warnings:
            print(f"   - {warning}")

    for pack in packs:
        print(f"\nScene {pack.scene_index + 1} reference pack (@{pack.element_name})")
        for image in pack.images:
            print(f"   {image.angle}: {image.prompt}")

    print(f"\n{len(shots)} shots, {sum(s.duration_seconds for s in shots)}s total\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cine-ai',
        description="Cine AI - Shot planning and prompt assembly for AI short films",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cine-ai movements --category character
  cine-ai genres
  cine-ai analyze analysis.json --target 45
  cine-ai plan analysis.json --characters cast.json --genre noir --seed 42
        """
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Save logs to file'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    movements = subparsers.add_parser('movements', help='List camera movements')
    movements.add_argument('--category', '-c', choices=CATEGORIES,
                           help='Only show one category')
    movements.add_argument('--json', action='store_true', help='Print JSON')
    movements.set_defaults(func=cmd_movements)

    genres = subparsers.add_parser('genres', help='List genre presets')
    genres.add_argument('--json', action='store_true', help='Print JSON')
    genres.set_defaults(func=cmd_genres)

    analyze = subparsers.add_parser('analyze', help='Score a target duration')
    analyze.add_argument('analysis', help='Script analysis file')
    analyze.add_argument('--target', '-t', type=float, required=True,
                         help='Target duration in seconds')
    analyze.add_argument('--json', action='store_true', help='Print JSON')
    analyze.set_defaults(func=cmd_analyze)

    plan = subparsers.add_parser('plan', help='Plan shots and compile prompts')
    plan.add_argument('analysis', help='Script analysis file')
    plan.add_argument('--characters', help='JSON file with the character roster')
    plan.add_argument('--genre', '-g', help='Genre preset id (see "genres")')
    plan.add_argument('--seed', type=int, help='Random seed for reproducibility')
    plan.add_argument('--scene-packs', action='store_true',
                      help='Also plan scene reference images')
    plan.add_argument('--json', action='store_true', help='Print JSON')
    plan.set_defaults(func=cmd_plan)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)

    try:
        return args.func(args)
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
