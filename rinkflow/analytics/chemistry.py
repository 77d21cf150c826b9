"""
Chemistry Analytics Module

Pairwise on-ice chemistry from shift overlaps and shot-level on-ice data.

Features:
- Shared ice time from shift overlaps (shifts optional)
- Shots for / against with both players on ice, and shots with only one of them
- Chemistry index (offence, shot support, defence) on a 0-100 scale
- Roster chemistry matrix, line evaluation and greedy line suggestions
"""

from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
from typing import Any, Iterable, Sequence

from loguru import logger

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig
from rinkflow.models.timeline import EventType, GameRecord, Shift, ShotEvent
from rinkflow.processors.rink import clamp, is_high_danger, parse_clock, round_half_up


class LineRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    POOR = "poor"


def pair_key(player_a: int, player_b: int) -> tuple[int, int]:
    """Canonical (low, high) key for an unordered pair."""
    return (player_a, player_b) if player_a < player_b else (player_b, player_a)


def shift_overlap(first: Shift, second: Shift) -> int:
    """Seconds two shifts share; 0 across periods."""
    if first.period != second.period:
        return 0
    start = max(parse_clock(first.start_time), parse_clock(second.start_time))
    end = min(parse_clock(first.end_time), parse_clock(second.end_time))
    return max(0, end - start)


def players_on_ice(shot: ShotEvent, shifts: Sequence[Shift], team_id: int, home_team_id: int) -> list[int]:
    """
    Players of a team on the ice for a shot.

    Uses the shot's own on-ice lists when either is populated, otherwise the
    shifts covering the shot clock.
    """
    if shot.home_players_on_ice or shot.away_players_on_ice:
        if team_id == home_team_id:
            return list(shot.home_players_on_ice)
        return list(shot.away_players_on_ice)

    shot_seconds = parse_clock(shot.time_in_period)
    on_ice: list[int] = []
    for shift in shifts:
        if shift.team_id != team_id or shift.period != shot.period:
            continue
        if parse_clock(shift.start_time) <= shot_seconds <= parse_clock(shift.end_time):
            if shift.player_id not in on_ice:
                on_ice.append(shift.player_id)
    return on_ice


@dataclass
class TogetherStats:
    shots: int = 0
    goals: int = 0
    high_danger_shots: int = 0
    shots_against: int = 0
    goals_against: int = 0


@dataclass
class SoloStats:
    shots: int = 0
    goals: int = 0


@dataclass
class PairAccumulator:
    """Running totals for one canonical pair."""

    player1_id: int
    player2_id: int
    toi_together: int = 0  # seconds
    shifts_overlapping: int = 0
    together: TogetherStats = field(default_factory=TogetherStats)
    player1_only: SoloStats = field(default_factory=SoloStats)
    player2_only: SoloStats = field(default_factory=SoloStats)

    def record_overlap(self, seconds: int) -> None:
        self.toi_together += seconds
        self.shifts_overlapping += 1

    def record_shot_for(self, is_goal: bool, high_danger: bool) -> None:
        self.together.shots += 1
        if is_goal:
            self.together.goals += 1
        if high_danger:
            self.together.high_danger_shots += 1

    def record_shot_against(self, is_goal: bool) -> None:
        self.together.shots_against += 1
        if is_goal:
            self.together.goals_against += 1

    def record_solo_shot(self, on_ice_player: int, is_goal: bool) -> None:
        solo = self.player1_only if on_ice_player == self.player1_id else self.player2_only
        solo.shots += 1
        if is_goal:
            solo.goals += 1


@dataclass
class PlayerPairChemistry:
    """Chemistry between two teammates."""

    player1_id: int
    player2_id: int
    games_analyzed: int
    toi_together: int
    shifts_overlapping: int
    together: TogetherStats
    player1_only: SoloStats
    player2_only: SoloStats
    chemistry_index: int  # 0-100
    shot_support_rate: int  # % of the pair's shots taken together
    offensive_chemistry: int
    defensive_chemistry: int  # 0-100, fewer shots against is better
    player1_name: str | None = None
    player2_name: str | None = None

    @property
    def sample_size(self) -> int:
        """Shift overlaps, or shared on-ice shot events when shifts are absent."""
        if self.shifts_overlapping > 0:
            return self.shifts_overlapping
        return self.together.shots + self.together.shots_against

    def to_dict(self) -> dict[str, Any]:
        return {
            "player1_id": self.player1_id,
            "player2_id": self.player2_id,
            "player1_name": self.player1_name,
            "player2_name": self.player2_name,
            "games_analyzed": self.games_analyzed,
            "toi_together": self.toi_together,
            "shifts_overlapping": self.shifts_overlapping,
            "sample_size": self.sample_size,
            "together": vars(self.together).copy(),
            "player1_only": vars(self.player1_only).copy(),
            "player2_only": vars(self.player2_only).copy(),
            "chemistry_index": self.chemistry_index,
            "shot_support_rate": self.shot_support_rate,
            "offensive_chemistry": self.offensive_chemistry,
            "defensive_chemistry": self.defensive_chemistry,
        }


@dataclass
class ChemistryMatrix:
    team_id: int
    games_analyzed: int
    players: list[tuple[int, str]]
    pairs: dict[tuple[int, int], PlayerPairChemistry] = field(default_factory=dict)

    def get(self, player_a: int, player_b: int) -> PlayerPairChemistry | None:
        return self.pairs.get(pair_key(player_a, player_b))

    def reliable_pairs(self, min_sample: int = DEFAULT_CONFIG.chemistry.matrix_min_sample) -> list[PlayerPairChemistry]:
        """Pairs whose sample exceeds min_sample."""
        return [pair for pair in self.pairs.values() if pair.sample_size > min_sample]

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "games_analyzed": self.games_analyzed,
            "players": [{"id": pid, "name": name} for pid, name in self.players],
            "pairs": {f"{a}-{b}": pair.to_dict() for (a, b), pair in self.pairs.items()},
        }


@dataclass
class LineChemistry:
    line_type: str  # forward, defense, mixed
    player_ids: list[int]
    player_names: list[str]
    avg_pair_chemistry: int
    toi_together: int
    shots_for: int
    shots_against: int
    shot_differential: int
    rating: LineRating

    def to_dict(self) -> dict[str, Any]:
        return {**vars(self), "rating": self.rating.value}


class ChemistryTracker:
    """
    Single pass over games accumulating every roster pair at once.

    Inputs:
        - GameRecord: shots with on-ice lists and/or shift charts
    Outputs:
        - PairAccumulator per canonical roster pair
    """

    def __init__(self, team_id: int, roster: Iterable[int], config: AnalyticsConfig = DEFAULT_CONFIG) -> None:
        self.team_id = team_id
        self.roster = sorted(set(roster))
        self.roster_set = set(self.roster)
        self.config = config
        self.games_analyzed = 0
        self.pairs: dict[tuple[int, int], PairAccumulator] = {
            key: PairAccumulator(player1_id=key[0], player2_id=key[1])
            for key in combinations(self.roster, 2)
        }

    def ingest_games(self, games: Iterable[GameRecord]) -> None:
        for game in games:
            self.ingest_game(game)

    def ingest_game(self, game: GameRecord) -> None:
        self.games_analyzed += 1
        team_shifts = [
            shift for shift in game.shifts
            if shift.team_id == self.team_id and shift.player_id in self.roster_set
        ]
        self._record_overlaps(team_shifts)

        opponent = game.opponent_of(self.team_id)
        for shot in game.shots:
            if shot.team_id == self.team_id:
                self._record_shot_for(shot, game, team_shifts)
            elif shot.team_id == opponent:
                self._record_shot_against(shot, game, team_shifts)

    def _record_overlaps(self, team_shifts: list[Shift]) -> None:
        by_player: dict[int, list[Shift]] = {}
        for shift in team_shifts:
            by_player.setdefault(shift.player_id, []).append(shift)

        minimum = self.config.chemistry.min_overlap_seconds
        for player_a, player_b in combinations(sorted(by_player), 2):
            pair = self.pairs[(player_a, player_b)]
            for first in by_player[player_a]:
                for second in by_player[player_b]:
                    overlap = shift_overlap(first, second)
                    if overlap >= minimum:
                        pair.record_overlap(overlap)

    def _our_players(self, shot: ShotEvent, game: GameRecord, team_shifts: list[Shift]) -> list[int]:
        on_ice = players_on_ice(shot, team_shifts, self.team_id, game.home_team_id)
        return sorted({player for player in on_ice if player in self.roster_set})

    def _record_shot_for(self, shot: ShotEvent, game: GameRecord, team_shifts: list[Shift]) -> None:
        on_ice = self._our_players(shot, game, team_shifts)
        is_goal = shot.result == EventType.GOAL.value
        high_danger = shot.has_coordinates and is_high_danger(
            shot.x_coord, shot.y_coord, self.config.shot_quality, self.config.rink
        )
        for key in combinations(on_ice, 2):
            self.pairs[key].record_shot_for(is_goal, high_danger)

        on_ice_set = set(on_ice)
        for off_ice in self.roster:
            if off_ice in on_ice_set:
                continue
            for player in on_ice:
                self.pairs[pair_key(player, off_ice)].record_solo_shot(player, is_goal)

    def _record_shot_against(self, shot: ShotEvent, game: GameRecord, team_shifts: list[Shift]) -> None:
        on_ice = self._our_players(shot, game, team_shifts)
        is_goal = shot.result == EventType.GOAL.value
        for key in combinations(on_ice, 2):
            self.pairs[key].record_shot_against(is_goal)

    def score(self, key: tuple[int, int], names: dict[int, str] | None = None) -> PlayerPairChemistry:
        """Turn a pair's totals into chemistry scores; untracked pairs score as unobserved."""
        names = names or {}
        weights = self.config.chemistry
        data = self.pairs.get(key) or PairAccumulator(player1_id=key[0], player2_id=key[1])

        apart_shots = data.player1_only.shots + data.player2_only.shots
        pair_shots = data.together.shots + apart_shots
        support = data.together.shots / pair_shots * 100 if pair_shots else 50.0

        minutes = data.toi_together / 60
        shots_per_minute = data.together.shots / minutes if minutes else 0.0
        against_per_minute = data.together.shots_against / minutes if minutes else 0.0
        offensive = min(100.0, shots_per_minute * weights.shots_per_minute_scale)
        defensive = max(0.0, 100 - against_per_minute * weights.against_per_minute_scale)

        observed = (
            data.toi_together > 0
            or pair_shots > 0
            or data.together.shots_against > 0
        )
        if observed:
            index = round_half_up(
                offensive * weights.offensive_weight
                + min(100.0, support) * weights.support_weight
                + defensive * weights.defensive_weight
            )
        else:
            index = 0

        return PlayerPairChemistry(
            player1_id=data.player1_id,
            player2_id=data.player2_id,
            player1_name=names.get(data.player1_id),
            player2_name=names.get(data.player2_id),
            games_analyzed=self.games_analyzed,
            toi_together=data.toi_together,
            shifts_overlapping=data.shifts_overlapping,
            together=TogetherStats(**vars(data.together)),
            player1_only=SoloStats(**vars(data.player1_only)),
            player2_only=SoloStats(**vars(data.player2_only)),
            chemistry_index=int(clamp(index)),
            shot_support_rate=round_half_up(support),
            offensive_chemistry=round_half_up(offensive),
            defensive_chemistry=round_half_up(defensive),
        )


def calculate_pair_chemistry(
    games: Iterable[GameRecord],
    player1_id: int,
    player2_id: int,
    team_id: int,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> PlayerPairChemistry:
    """
    Chemistry for one pair of teammates.

    Args:
        games: Game records
        player1_id: First player (order does not matter)
        player2_id: Second player
        team_id: Team both players belong to
        config: Analytics configuration

    Returns:
        PlayerPairChemistry keyed by the ascending pair
    """
    key = pair_key(player1_id, player2_id)
    tracker = ChemistryTracker(team_id, key, config)
    tracker.ingest_games(games)
    return tracker.score(key)


def build_chemistry_matrix(
    games: Sequence[GameRecord],
    team_id: int,
    player_ids: Sequence[int],
    player_names: dict[int, str] | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> ChemistryMatrix:
    """
    Chemistry for every unordered pair of roster players.

    Args:
        games: Game records
        team_id: Team ID
        player_ids: Roster player IDs
        player_names: Optional ID -> display name lookup
        config: Analytics configuration

    Returns:
        ChemistryMatrix keyed by canonical (low, high) pairs
    """
    player_names = player_names or {}
    tracker = ChemistryTracker(team_id, player_ids, config)
    tracker.ingest_games(games)

    pairs = {key: tracker.score(key, player_names) for key in tracker.pairs}
    logger.info(f"Chemistry matrix for team {team_id}: {len(pairs)} pairs over {tracker.games_analyzed} games")

    return ChemistryMatrix(
        team_id=team_id,
        games_analyzed=tracker.games_analyzed,
        players=[(pid, player_names.get(pid, f"Player {pid}")) for pid in player_ids],
        pairs=pairs,
    )


def rate_line(avg_chemistry: float) -> LineRating:
    if avg_chemistry >= 75:
        return LineRating.EXCELLENT
    if avg_chemistry >= 60:
        return LineRating.GOOD
    if avg_chemistry >= 45:
        return LineRating.AVERAGE
    if avg_chemistry >= 30:
        return LineRating.BELOW_AVERAGE
    return LineRating.POOR


def evaluate_line_combination(
    matrix: ChemistryMatrix,
    player_ids: Sequence[int],
    player_names: dict[int, str] | None = None,
    line_type: str = "forward",
) -> LineChemistry:
    """Average pair chemistry and shared shot totals for a line."""
    player_names = player_names or {}
    pairs = []
    for player_a, player_b in combinations(player_ids, 2):
        pair = matrix.get(player_a, player_b)
        if pair is not None:
            pairs.append(pair)

    avg = sum(p.chemistry_index for p in pairs) / len(pairs) if pairs else 50.0
    shots_for = sum(p.together.shots for p in pairs)
    shots_against = sum(p.together.shots_against for p in pairs)

    return LineChemistry(
        line_type=line_type,
        player_ids=list(player_ids),
        player_names=[player_names.get(pid, f"Player {pid}") for pid in player_ids],
        avg_pair_chemistry=round_half_up(avg),
        toi_together=sum(p.toi_together for p in pairs),
        shots_for=shots_for,
        shots_against=shots_against,
        shot_differential=shots_for - shots_against,
        rating=rate_line(avg),
    )


def find_chemistry_extremes(
    matrix: ChemistryMatrix,
    top_n: int = 5,
    min_sample: int = DEFAULT_CONFIG.chemistry.extremes_min_sample,
) -> tuple[list[PlayerPairChemistry], list[PlayerPairChemistry]]:
    """Return (best, worst) pairs among those with enough shared sample."""
    qualified = [pair for pair in matrix.pairs.values() if pair.sample_size >= min_sample]
    ranked = sorted(qualified, key=lambda pair: pair.chemistry_index, reverse=True)
    worst = ranked[-top_n:] if top_n > 0 else []
    return ranked[:top_n], list(reversed(worst))


def _best_pair(matrix: ChemistryMatrix, available: list[int]) -> tuple[int, int] | None:
    best = None
    best_index = -1
    for player_a, player_b in combinations(available, 2):
        pair = matrix.get(player_a, player_b)
        if pair is not None and pair.chemistry_index > best_index:
            best_index = pair.chemistry_index
            best = (player_a, player_b)
    return best


def suggest_line_combinations(
    matrix: ChemistryMatrix,
    forward_ids: Sequence[int],
    defense_ids: Sequence[int],
    player_names: dict[int, str] | None = None,
) -> tuple[list[LineChemistry], list[LineChemistry]]:
    """
    Greedy line building: seed with the best available pair, then add the
    forward with the best average chemistry to both.

    Returns:
        (forward_lines, defense_pairs), at most four lines and three pairs
    """
    forward_lines: list[LineChemistry] = []
    used: set[int] = set()
    while len(forward_lines) < 4:
        available = [pid for pid in forward_ids if pid not in used]
        if len(available) < 3:
            break
        seed = _best_pair(matrix, available)
        if seed is None:
            break

        third = None
        third_score = -1.0
        for candidate in available:
            if candidate in seed:
                continue
            scores = []
            for member in seed:
                pair = matrix.get(member, candidate)
                scores.append(pair.chemistry_index if pair is not None else 50)
            average = sum(scores) / 2
            if average > third_score:
                third_score = average
                third = candidate
        if third is None:
            break

        line = [seed[0], seed[1], third]
        used.update(line)
        forward_lines.append(evaluate_line_combination(matrix, line, player_names, "forward"))

    defense_pairs: list[LineChemistry] = []
    used_defense: set[int] = set()
    while len(defense_pairs) < 3:
        available = [pid for pid in defense_ids if pid not in used_defense]
        if len(available) < 2:
            break
        seed = _best_pair(matrix, available)
        if seed is None:
            break
        used_defense.update(seed)
        defense_pairs.append(evaluate_line_combination(matrix, list(seed), player_names, "defense"))

    return forward_lines, defense_pairs
