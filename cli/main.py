#!/usr/bin/env python3
"""
Command-line reports for rinkflow

Reads a JSON list of game records and prints one analytics report as JSON.

Usage:
    python -m cli.main --games games.json --team 22 --report decision
    python -m cli.main --games games.json --team 22 --player 8478402 --report evolution -v
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from loguru import logger
from pydantic import ValidationError

from rinkflow.analytics import (
    WindowMode,
    build_chemistry_matrix,
    compute_attack_dna,
    compute_behavioral_evolution,
    compute_decision_quality_metrics,
    compute_shot_profile,
    find_chemistry_extremes,
    suggest_line_combinations,
    validate_decision_metrics,
)
from rinkflow.config import AnalyticsConfig, load_config
from rinkflow.models.timeline import GameRecord
from rinkflow.processors.zone_transitions import (
    ZoneEntry,
    ZoneExit,
    calculate_zone_analytics,
    detect_zone_entries,
    detect_zone_exits,
)

REPORTS = ("decision", "attack-dna", "shot-profile", "zones", "evolution", "chemistry")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI usage."""
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(sys.stderr, level="WARNING")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rinkflow",
        description="Tactical analytics over hockey event streams",
    )
    parser.add_argument("--games", required=True, type=Path, help="JSON file with a list of game records")
    parser.add_argument("--team", required=True, type=int, help="Team ID to analyze")
    parser.add_argument("--player", type=int, default=None, help="Restrict to one player")
    parser.add_argument("--report", choices=REPORTS, default="decision", help="Report to print")
    parser.add_argument("--window", type=int, default=10, help="Evolution window size in games")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in WindowMode],
        default=WindowMode.PREVIOUS.value,
        help="Evolution baseline",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML config overrides")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def load_games(path: Path) -> list[GameRecord]:
    """Read and validate game records from a JSON file."""
    with open(path) as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = [raw]
    return [GameRecord.model_validate(item) for item in raw]


def team_zone_transitions(
    games: Sequence[GameRecord],
    team_id: int,
    config: AnalyticsConfig,
) -> tuple[list[ZoneEntry], list[ZoneExit]]:
    entries: list[ZoneEntry] = []
    exits: list[ZoneExit] = []
    for game in games:
        entries.extend(detect_zone_entries(game.events, team_id, config))
        exits.extend(detect_zone_exits(game.events, team_id, config))
    return entries, exits


def team_roster(games: Sequence[GameRecord], team_id: int) -> list[int]:
    """Players seen for a team in shift charts or shot on-ice lists."""
    roster: set[int] = set()
    for game in games:
        for shift in game.shifts:
            if shift.team_id == team_id:
                roster.add(shift.player_id)
        home = game.is_home(team_id)
        for shot in game.shots:
            roster.update(shot.home_players_on_ice if home else shot.away_players_on_ice)
    return sorted(roster)


def run_report(
    report: str,
    games: list[GameRecord],
    team_id: int,
    player_id: int | None,
    window: int,
    mode: WindowMode,
    config: AnalyticsConfig,
) -> dict[str, Any]:
    """Compute one report and return it as a JSON-ready dict."""
    if report == "decision":
        metrics = compute_decision_quality_metrics(games, team_id, player_id, config)
        validation = validate_decision_metrics(metrics)
        return {**metrics.to_dict(), "validation_errors": validation.errors}

    if report == "zones":
        entries, exits = team_zone_transitions(games, team_id, config)
        return {
            **calculate_zone_analytics(entries, exits).to_dict(),
            "entries": [entry.to_dict() for entry in entries],
            "exits": [exit_.to_dict() for exit_ in exits],
        }

    if report == "attack-dna":
        entries, _ = team_zone_transitions(games, team_id, config)
        return compute_attack_dna(games, team_id, player_id, entries, config).to_dict()

    if report == "shot-profile":
        entries, _ = team_zone_transitions(games, team_id, config)
        return compute_shot_profile(games, team_id, player_id, entries, config).to_dict()

    if report == "evolution":
        return compute_behavioral_evolution(
            games, team_id, player_id, window_size=window, mode=mode, config=config
        ).to_dict()

    matrix = build_chemistry_matrix(games, team_id, team_roster(games, team_id), config=config)
    best, worst = find_chemistry_extremes(matrix, min_sample=config.chemistry.extremes_min_sample)
    forwards, defense = suggest_line_combinations(matrix, [pid for pid, _ in matrix.players], [])
    return {
        **matrix.to_dict(),
        "best_pairs": [pair.to_dict() for pair in best],
        "worst_pairs": [pair.to_dict() for pair in worst],
        "suggested_lines": [line.to_dict() for line in forwards + defense],
    }


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    config = load_config(args.config)
    try:
        games = load_games(args.games)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read games from {args.games}: {e}")
        return 1
    except ValidationError as e:
        logger.error(f"Invalid game record in {args.games}: {e}")
        return 1

    logger.info(f"Loaded {len(games)} games from {args.games}")
    result = run_report(
        args.report,
        games,
        args.team,
        args.player,
        args.window,
        WindowMode(args.mode),
        config,
    )
    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
