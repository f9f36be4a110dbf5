"""
Shared pytest fixtures for the tournament engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
from datetime import datetime, timezone

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from engine.models import BracketSlot, GameResult, Match, Registration


def make_match(match_id, team1_id, team2_id, scores, status='completed'):
    """Build a match from a list of (team1_score, team2_score) games."""
    games = [GameResult(i + 1, s1, s2) for i, (s1, s2) in enumerate(scores)]
    team1_games = sum(1 for g in games if g.winning_side == 1)
    winning_side = 1 if team1_games > len(games) - team1_games else 2
    return Match(id=match_id, team1_id=team1_id, team2_id=team2_id,
                 games=games, winning_side=winning_side, status=status)


def make_slot(**overrides):
    fields = {
        'id': 'slot-1',
        'tournament_id': 't1',
        'round': 1,
        'position': 0,
    }
    fields.update(overrides)
    return BracketSlot(**fields)


@pytest.fixture
def now():
    return datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def eight_team_ids():
    """Teams seeded 1..8."""
    return [f"seed{i}" for i in range(1, 9)]


@pytest.fixture
def semifinal_bracket():
    """Two semifinals feeding a final."""
    semi1 = make_slot(id='semi1', position=0, team1_id='A', team2_id='D', next_slot_id='final')
    semi2 = make_slot(id='semi2', position=1, team1_id='B', team2_id='C', next_slot_id='final')
    final = make_slot(id='final', round=2, position=0)
    return [semi1, semi2, final]


@pytest.fixture
def rated_registrations():
    return [
        Registration('p1', skill_rating=5.0),
        Registration('p2', skill_rating=5.0),
        Registration('p3', skill_rating=4.0),
        Registration('p4', skill_rating=4.0),
        Registration('p5', skill_rating=3.0),
        Registration('p6', skill_rating=3.0),
        Registration('p7', skill_rating=3.5),
        Registration('p8', skill_rating=3.5),
    ]


@pytest.fixture
def user_names():
    return {
        'u1': 'Alice',
        'u2': 'Bob',
        'u3': 'Carol',
        'u4': 'Dave',
        'u5': 'Erin',
    }
