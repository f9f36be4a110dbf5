"""
Skill tiers from a player's recent results.

A player's rolling history (newest first, at most 50 entries) is reduced to a
score in [0, 1]: a win rate weighted by recency and opponent strength,
shrunk toward a 0.25 prior while the sample is small. The score moves the
player along the tier ladder with hysteresis so a player sitting on a
boundary does not flip between tiers on every match.
"""
import math
from collections import deque
from itertools import islice
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from .models import GAME_TYPES, TIERS, RecentResult, format_timestamp, parse_timestamp

RING_BUFFER_SIZE = 50

TIER_MULTIPLIER = {
    'beginner': 0.5,
    'intermediate': 0.8,
    'advanced': 1.0,
    'expert': 1.3,
}

# (first index past the bucket, weight); index 0 is the most recent result
RECENCY_BUCKETS = (
    (10, 1.0),
    (25, 0.8),
    (RING_BUFFER_SIZE, 0.6),
)

DAMPING_MATCHES = 15
PRIOR_SCORE = 0.25

# Boundary between TIERS[i] and TIERS[i + 1]: (promote above, demote below)
TIER_BOUNDARIES = (
    (0.33, 0.27),
    (0.53, 0.47),
    (0.73, 0.67),
)

UNIQUE_OPPONENT_ESTIMATE = 0.7


def normalize_tier(tier) -> str:
    """Anything outside the ladder counts as the lowest rung."""
    return tier if tier in TIERS else TIERS[0]


class RecentResults:
    """Fixed-capacity history, newest first; the oldest entry is evicted on overflow."""

    def __init__(self, results: Iterable[RecentResult] = (), capacity: int = RING_BUFFER_SIZE):
        self._results = deque(islice(results, capacity), maxlen=capacity)

    @property
    def capacity(self):
        return self._results.maxlen

    def push(self, result: RecentResult):
        self._results.appendleft(result)

    def __len__(self):
        return len(self._results)

    def __iter__(self):
        return iter(self._results)

    def __getitem__(self, index):
        return self._results[index]

    def to_list(self):
        return [r.to_dict() for r in self._results]

    @classmethod
    def from_list(cls, data, capacity: int = RING_BUFFER_SIZE):
        return cls((RecentResult.from_dict(item) for item in data or []), capacity)

    def __repr__(self):
        return f"RecentResults({len(self)}/{self.capacity})"


def get_recency_weight(index: int) -> float:
    for max_index, weight in RECENCY_BUCKETS:
        if index < max_index:
            return weight
    return RECENCY_BUCKETS[-1][1]


def compute_tier_score(results: Sequence[RecentResult]) -> float:
    """
    Weighted win rate over the recent results, damped toward the prior.

    Each result weighs recency x opponent multiplier; wins add that weight to
    the numerator too. With fewer than 15 results the rate is pulled toward
    0.25 in proportion to the missing sample. No results gives exactly 0.25.
    """
    if len(results) == 0:
        return PRIOR_SCORE

    weighted_wins = 0.0
    total_weight = 0.0
    for index, result in enumerate(results):
        weight = get_recency_weight(index) * TIER_MULTIPLIER[normalize_tier(result.opponent_tier)]
        if result.is_win:
            weighted_wins += weight
        total_weight += weight

    raw_score = weighted_wins / total_weight if total_weight > 0 else 0.0
    damping = min(len(results) / DAMPING_MATCHES, 1.0)
    score = PRIOR_SCORE + (raw_score - PRIOR_SCORE) * damping

    return max(0.0, min(1.0, score))


def compute_tier(score: float, current_tier) -> str:
    """
    Move along the tier ladder with hysteresis.

    Promotion needs a score strictly above the upper threshold of the
    boundary, demotion strictly below the lower one; in between the tier
    holds. Several boundaries can be crossed in one call. An unrecognized
    current tier resets to beginner without evaluating the score.
    """
    if current_tier not in TIERS:
        return TIERS[0]
    index = TIERS.index(current_tier)

    while True:
        if index < len(TIER_BOUNDARIES) and score > TIER_BOUNDARIES[index][0]:
            index += 1
        elif index > 0 and score < TIER_BOUNDARIES[index - 1][1]:
            index -= 1
        else:
            return TIERS[index]


def compute_tier_confidence(match_count: int, unique_opponents: int) -> str:
    if match_count < 8:
        return 'low'
    if unique_opponents < 3:
        return 'low'
    if match_count < 20:
        return 'medium'
    return 'high'


def estimate_unique_opponents(match_count: int) -> int:
    return math.ceil(match_count * UNIQUE_OPPONENT_ESTIMATE)


class PlayerStats:
    """A player's running record and current tier, as kept by the rating store."""

    def __init__(self, total_matches=0, wins=0, losses=0, current_streak=None, best_win_streak=0,
                 singles=None, doubles=None, recent_results=None, tier_score=PRIOR_SCORE,
                 tier='beginner', tier_confidence='low', last_played_at=None):
        self.total_matches = total_matches
        self.wins = wins
        self.losses = losses
        self.current_streak = dict(current_streak) if current_streak else {'type': 'W', 'count': 0}
        self.best_win_streak = best_win_streak
        self.singles = dict(singles) if singles else {'matches': 0, 'wins': 0, 'losses': 0}
        self.doubles = dict(doubles) if doubles else {'matches': 0, 'wins': 0, 'losses': 0}
        self.recent_results = recent_results if recent_results is not None else RecentResults()
        self.tier_score = tier_score
        self.tier = tier
        self.tier_confidence = tier_confidence
        self.last_played_at = parse_timestamp(last_played_at)

    @property
    def win_rate(self):
        return self.wins / self.total_matches if self.total_matches else 0.0

    def to_dict(self):
        return {
            'total_matches': self.total_matches,
            'wins': self.wins,
            'losses': self.losses,
            'win_rate': self.win_rate,
            'current_streak': dict(self.current_streak),
            'best_win_streak': self.best_win_streak,
            'singles': dict(self.singles),
            'doubles': dict(self.doubles),
            'recent_results': self.recent_results.to_list(),
            'tier_score': self.tier_score,
            'tier': self.tier,
            'tier_confidence': self.tier_confidence,
            'last_played_at': format_timestamp(self.last_played_at),
        }

    @classmethod
    def from_dict(cls, data, capacity=RING_BUFFER_SIZE):
        return cls(
            total_matches=data.get('total_matches', 0),
            wins=data.get('wins', 0),
            losses=data.get('losses', 0),
            current_streak=data.get('current_streak'),
            best_win_streak=data.get('best_win_streak', 0),
            singles=data.get('singles'),
            doubles=data.get('doubles'),
            recent_results=RecentResults.from_list(data.get('recent_results'), capacity),
            tier_score=data.get('tier_score', PRIOR_SCORE),
            tier=normalize_tier(data.get('tier')),
            tier_confidence=data.get('tier_confidence', 'low'),
            last_played_at=data.get('last_played_at'),
        )

    def __repr__(self):
        return f"PlayerStats({self.wins}-{self.losses}, tier={self.tier}, confidence={self.tier_confidence})"


def update_streak(current: dict, result: str) -> dict:
    streak_type = 'W' if result == 'win' else 'L'
    if current.get('type') == streak_type:
        return {'type': streak_type, 'count': current.get('count', 0) + 1}
    return {'type': streak_type, 'count': 1}


def record_match_result(stats: PlayerStats, result: str, opponent_tier='beginner',
                        completed_at: Optional[datetime] = None, game_type: str = 'doubles',
                        unique_opponents: Optional[int] = None) -> PlayerStats:
    """
    Fold one completed match into ``stats`` and recompute the tier.

    Updates totals, per-format counts and streaks, pushes the result onto the
    ring buffer, then rescores. ``unique_opponents`` falls back to an
    estimate from the match count when the caller does not track it.
    """
    if result not in ('win', 'loss'):
        raise ValueError(f"Result must be 'win' or 'loss', got {result!r}")
    if game_type not in GAME_TYPES:
        raise ValueError(f"Unknown game type: {game_type}")

    completed_at = parse_timestamp(completed_at) or datetime.now(timezone.utc)
    is_win = result == 'win'

    stats.total_matches += 1
    stats.wins += 1 if is_win else 0
    stats.losses += 0 if is_win else 1

    format_stats = stats.singles if game_type == 'singles' else stats.doubles
    format_stats['matches'] += 1
    format_stats['wins'] += 1 if is_win else 0
    format_stats['losses'] += 0 if is_win else 1

    stats.current_streak = update_streak(stats.current_streak, result)
    if stats.current_streak['type'] == 'W' and stats.current_streak['count'] > stats.best_win_streak:
        stats.best_win_streak = stats.current_streak['count']

    stats.recent_results.push(RecentResult(
        result=result,
        opponent_tier=normalize_tier(opponent_tier),
        completed_at=completed_at,
        game_type=game_type,
    ))

    stats.tier_score = compute_tier_score(stats.recent_results)
    stats.tier = compute_tier(stats.tier_score, stats.tier)
    if unique_opponents is None:
        unique_opponents = estimate_unique_opponents(stats.total_matches)
    stats.tier_confidence = compute_tier_confidence(stats.total_matches, unique_opponents)
    stats.last_played_at = completed_at

    return stats
