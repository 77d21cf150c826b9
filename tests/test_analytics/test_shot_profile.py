"""
Tests for Shot Profile Analytics

Validates shot zones, density binning, attack metrics and profile axes,
per-game metrics and season trend windows.
"""

import math

import pytest

from rinkflow.analytics.shot_profile import (
    AttackProfileStyle,
    GameMetrics,
    ShotZone,
    TrendWindow,
    build_season_trend,
    calculate_attack_metrics,
    calculate_attack_profile,
    calculate_game_metrics,
    calculate_rolling_averages,
    classify_shot_zone,
    compute_shot_density_map,
    compute_shot_profile,
    compute_zone_distribution,
    detect_inflection_points,
    extract_shot_locations,
)
from rinkflow.processors.attack_sequences import SequenceResult, build_attack_sequences


def _game_metrics(game_id: int, game_date: str, high_danger_pct: float) -> GameMetrics:
    return GameMetrics(
        game_id=game_id,
        game_date=game_date,
        opponent_team_id=10,
        is_home=True,
        total_shots=10,
        goals=1,
        high_danger_shots=int(high_danger_pct / 10),
        avg_shot_distance=30.0,
        avg_time_to_shot=7.0,
        controlled_entries=5,
        total_entries=10,
        high_danger_pct=high_danger_pct,
        controlled_entry_pct=50.0,
        shooting_pct=10.0,
    )


def _window(high_danger_pct: float, end_date: str) -> TrendWindow:
    return TrendWindow(
        start_date="2023-10-01",
        end_date=end_date,
        game_count=5,
        high_danger_pct=high_danger_pct,
        avg_time_to_shot=7.0,
        controlled_entry_pct=50.0,
        avg_shot_distance=30.0,
        shooting_pct=10.0,
    )


class TestShotZones:
    """Tests for classify_shot_zone and compute_zone_distribution."""

    @pytest.mark.parametrize(
        "x,y,zone",
        [
            (95, 0, ShotZone.BEHIND_NET),
            (40, 0, ShotZone.POINT),
            (80, 5, ShotZone.HIGH_SLOT),
            (60, 5, ShotZone.LOW_SLOT),
            (70, 20, ShotZone.LEFT_BOARDS),
            (70, -20, ShotZone.RIGHT_BOARDS),
            (-80, -5, ShotZone.HIGH_SLOT),
        ],
    )
    def test_classify(self, x, y, zone):
        assert classify_shot_zone(x, y) == zone

    def test_distribution_sums_to_100(self, sample_game):
        shots = extract_shot_locations([sample_game], 22)
        distribution = compute_zone_distribution(shots)

        assert len(distribution) == len(ShotZone)
        assert sum(d.percentage for d in distribution) == pytest.approx(100.0)
        high_slot = next(d for d in distribution if d.zone == ShotZone.HIGH_SLOT)
        assert high_slot.shot_count == 2
        assert high_slot.goal_count == 1
        assert high_slot.deviation == pytest.approx(100.0 - 22.0)

    def test_empty_distribution_is_all_zero(self):
        distribution = compute_zone_distribution([])
        assert all(d.percentage == 0.0 for d in distribution)


class TestShotLocations:
    """Tests for extract_shot_locations and the density map."""

    def test_extract(self, sample_game, make_event, make_game):
        shots = extract_shot_locations([sample_game], 22)

        assert [shot.result for shot in shots] == [SequenceResult.SAVE, SequenceResult.GOAL]
        assert shots[0].distance_from_goal == pytest.approx(math.sqrt(106))
        assert all(shot.is_high_danger for shot in shots)
        assert shots[0].game_date == "2023-10-10"

        unlocated = make_game([make_event(1, "shot-on-goal", 22, None, None, "00:10")])
        assert extract_shot_locations([unlocated], 22) == []

    def test_density_map_mirrors_negative_end(self, sample_game, make_event, make_game):
        """Shots at the negative end are reflected into the same frame."""
        game = make_game(
            [
                make_event(1, "shot-on-goal", 22, 80, 5, "00:10"),
                make_event(2, "goal", 22, -80, 5, "00:20"),
            ]
        )
        density = compute_shot_density_map(extract_shot_locations([game], 22))

        assert density.total_shots == 2
        assert density.max_density == 1
        counts = {(c.grid_x, c.grid_y): c for c in density.cells if c.shot_count}
        assert set(counts) == {(4, 4), (4, 3)}
        assert counts[(4, 3)].goal_count == 1
        assert counts[(4, 3)].shot_pct == pytest.approx(100.0)
        assert density.to_numpy("shot_count").sum() == 2

    def test_empty_density(self):
        density = compute_shot_density_map([])
        assert len(density.cells) == 40
        assert density.max_density == 1


class TestAttackMetricsAndProfile:
    """Tests for calculate_attack_metrics and calculate_attack_profile."""

    def test_sample_metrics(self, sample_game):
        shots = extract_shot_locations([sample_game], 22)
        sequences = build_attack_sequences(sample_game, 22)

        metrics = calculate_attack_metrics(shots, sequences, [])

        assert metrics.high_danger_shot_pct == pytest.approx(100.0)
        assert metrics.avg_time_to_shot == pytest.approx(4.5)
        assert metrics.shooting_pct == pytest.approx(50.0)
        assert metrics.shot_efficiency == pytest.approx(50.0)
        assert metrics.controlled_entry_pct == 0.0
        assert metrics.vs_league_avg["high_danger_shot_pct"] == pytest.approx(72.0)

    def test_empty_metrics_use_baselines(self):
        metrics = calculate_attack_metrics([], [], [])
        assert metrics.avg_shot_distance == pytest.approx(30.0)
        assert metrics.avg_time_to_shot == pytest.approx(7.5)
        assert metrics.shooting_pct == 0.0

    def test_profile(self, sample_game):
        shots = extract_shot_locations([sample_game], 22)
        metrics = calculate_attack_metrics(shots, build_attack_sequences(sample_game, 22), [])

        profile = calculate_attack_profile(metrics, 22, sample_games=1)

        assert profile.danger_zone_focus == 100
        assert profile.attack_speed == 65
        assert profile.entry_control == 0
        assert profile.shooting_depth == 96
        assert profile.style_strength == 48
        assert profile.primary_style == AttackProfileStyle.SLOT_FOCUSED

    def test_league_average_profile_is_balanced(self, config):
        league = config.league
        metrics = calculate_attack_metrics([], [], [])
        metrics.high_danger_shot_pct = league.high_danger_pct
        metrics.avg_time_to_shot = league.avg_time_to_shot
        metrics.controlled_entry_pct = league.controlled_entry_pct
        metrics.avg_shot_distance = league.avg_shot_distance

        profile = calculate_attack_profile(metrics, 22)

        assert profile.danger_zone_focus == 50
        assert profile.attack_speed == 50
        assert profile.primary_style == AttackProfileStyle.BALANCED


class TestSeasonTrend:
    """Tests for per-game metrics, rolling windows and inflections."""

    def test_game_metrics(self, sample_game):
        metrics = calculate_game_metrics(sample_game, 22)

        assert metrics.opponent_team_id == 10
        assert metrics.is_home is True
        assert metrics.total_shots == 2
        assert metrics.goals == 1
        assert metrics.total_entries == 1
        assert metrics.controlled_entry_pct == 0.0
        assert metrics.avg_time_to_shot == pytest.approx(4.5)

    def test_rolling_windows(self):
        games = [_game_metrics(i, f"2023-10-{i + 10}", 10.0 * i) for i in range(1, 7)]

        windows = calculate_rolling_averages(games, window_size=5)

        assert len(windows) == 2
        assert windows[0].start_date == "2023-10-11"
        assert windows[0].end_date == "2023-10-15"
        assert windows[0].high_danger_pct == pytest.approx(30.0)
        assert windows[1].high_danger_pct == pytest.approx(40.0)

    def test_too_few_games(self):
        games = [_game_metrics(i, "2023-10-10", 20.0) for i in range(4)]
        assert calculate_rolling_averages(games, window_size=5) == []

    def test_inflection_points(self):
        windows = [_window(20.0, "2023-10-15"), _window(30.0, "2023-10-16"), _window(31.0, "2023-10-17")]

        points = detect_inflection_points(windows)

        assert len(points) == 1
        assert points[0].metric == "high_danger_pct"
        assert points[0].change == pytest.approx(50.0)
        assert points[0].direction == "up"
        assert points[0].date == "2023-10-16"

    def test_season_trend_sorts_by_date(self):
        games = [_game_metrics(i, f"2023-11-{10 - i:02d}", 20.0) for i in range(6)]

        trend = build_season_trend(games, 22, "20232024")

        assert [g.game_date for g in trend.game_metrics] == sorted(g.game_date for g in games)
        assert len(trend.windows) == 2
        assert trend.inflection_points == []


class TestComputeShotProfile:
    def test_sample_game(self, sample_game):
        report = compute_shot_profile([sample_game], 22)

        assert report.total_shots == 2
        assert report.total_goals == 1
        assert report.games_analyzed == 1
        assert report.profile.sample_games == 1
        assert "shots" not in report.to_dict()
        assert len(report.to_dict(include_shots=True)["shots"]) == 2

    def test_player_filter(self, sample_game):
        report = compute_shot_profile([sample_game], 22, player_id=29)
        assert report.total_shots == 1
        assert report.total_goals == 1
