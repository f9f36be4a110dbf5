"""
Entities exchanged between the engine and the stores around it.
"""
from datetime import datetime, timezone
from typing import Optional


TIERS = ('beginner', 'intermediate', 'advanced', 'expert')
GAME_TYPES = ('singles', 'doubles')


def parse_timestamp(value) -> Optional[datetime]:
    """Accept a datetime, an ISO string or epoch milliseconds. Naive values are UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        text = str(value)
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Team:
    def __init__(self, id, tournament_id, name, player_ids=None, seed=None, pool_id=None):
        self.id = id
        self.tournament_id = tournament_id
        self.name = name
        self.player_ids = list(player_ids) if player_ids else []
        self.seed = seed
        self.pool_id = pool_id

    def to_dict(self):
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'name': self.name,
            'player_ids': list(self.player_ids),
            'seed': self.seed,
            'pool_id': self.pool_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            tournament_id=data.get('tournament_id'),
            name=data.get('name', data['id']),
            player_ids=data.get('player_ids'),
            seed=data.get('seed'),
            pool_id=data.get('pool_id'),
        )

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, player_ids={self.player_ids})"


class PoolScheduleEntry:
    def __init__(self, round, team1_id, team2_id, match_id=None, court=None):
        self.round = round
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.match_id = match_id
        self.court = court

    def to_dict(self):
        return {
            'round': self.round,
            'team1_id': self.team1_id,
            'team2_id': self.team2_id,
            'match_id': self.match_id,
            'court': self.court,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            round=data['round'],
            team1_id=data['team1_id'],
            team2_id=data['team2_id'],
            match_id=data.get('match_id'),
            court=data.get('court'),
        )

    def __repr__(self):
        return f"PoolScheduleEntry(round={self.round}, {self.team1_id} vs {self.team2_id}, match_id={self.match_id})"


class PoolStanding:
    def __init__(self, team_id, wins=0, losses=0, points_for=0, points_against=0):
        self.team_id = team_id
        self.wins = wins
        self.losses = losses
        self.points_for = points_for
        self.points_against = points_against

    @property
    def point_diff(self):
        return self.points_for - self.points_against

    def to_dict(self):
        return {
            'team_id': self.team_id,
            'wins': self.wins,
            'losses': self.losses,
            'points_for': self.points_for,
            'points_against': self.points_against,
            'point_diff': self.point_diff,
        }

    @classmethod
    def from_dict(cls, data):
        # point_diff is derived, so any stored value is ignored
        return cls(
            team_id=data['team_id'],
            wins=data.get('wins', 0),
            losses=data.get('losses', 0),
            points_for=data.get('points_for', 0),
            points_against=data.get('points_against', 0),
        )

    def __repr__(self):
        return f"PoolStanding(team_id={self.team_id}, {self.wins}-{self.losses}, diff={self.point_diff})"


class Pool:
    def __init__(self, id, tournament_id, name, team_ids=None, schedule=None, standings=None):
        self.id = id
        self.tournament_id = tournament_id
        self.name = name
        self.team_ids = list(team_ids) if team_ids else []
        self.schedule = list(schedule) if schedule else []
        self.standings = list(standings) if standings else []

    def to_dict(self):
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'name': self.name,
            'team_ids': list(self.team_ids),
            'schedule': [entry.to_dict() for entry in self.schedule],
            'standings': [standing.to_dict() for standing in self.standings],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id', data.get('name')),
            tournament_id=data.get('tournament_id'),
            name=data.get('name', data.get('id')),
            team_ids=data.get('team_ids'),
            schedule=[PoolScheduleEntry.from_dict(e) for e in data.get('schedule', [])],
            standings=[PoolStanding.from_dict(s) for s in data.get('standings', [])],
        )

    def __repr__(self):
        return f"Pool(name={self.name}, team_ids={self.team_ids})"


class BracketSlot:
    def __init__(self, id, tournament_id, round, position, team1_id=None, team2_id=None,
                 match_id=None, winner_id=None, next_slot_id=None):
        self.id = id
        self.tournament_id = tournament_id
        self.round = round
        self.position = position
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.match_id = match_id
        self.winner_id = winner_id
        self.next_slot_id = next_slot_id

    @property
    def is_bye(self):
        """True when exactly one side of the slot is filled."""
        return (self.team1_id is None) != (self.team2_id is None)

    def to_dict(self):
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'round': self.round,
            'position': self.position,
            'team1_id': self.team1_id,
            'team2_id': self.team2_id,
            'match_id': self.match_id,
            'winner_id': self.winner_id,
            'next_slot_id': self.next_slot_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            tournament_id=data.get('tournament_id'),
            round=data['round'],
            position=data['position'],
            team1_id=data.get('team1_id'),
            team2_id=data.get('team2_id'),
            match_id=data.get('match_id'),
            winner_id=data.get('winner_id'),
            next_slot_id=data.get('next_slot_id'),
        )

    def __repr__(self):
        return (f"BracketSlot(id={self.id}, round={self.round}, position={self.position}, "
                f"{self.team1_id} vs {self.team2_id}, winner={self.winner_id})")


class GameResult:
    def __init__(self, game_number, team1_score, team2_score, winning_side=None):
        self.game_number = game_number
        self.team1_score = team1_score
        self.team2_score = team2_score
        if winning_side is None:
            winning_side = 1 if team1_score > team2_score else 2
        self.winning_side = winning_side

    def to_dict(self):
        return {
            'game_number': self.game_number,
            'team1_score': self.team1_score,
            'team2_score': self.team2_score,
            'winning_side': self.winning_side,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            game_number=data.get('game_number', 1),
            team1_score=data['team1_score'],
            team2_score=data['team2_score'],
            winning_side=data.get('winning_side'),
        )

    def __repr__(self):
        return f"GameResult(game={self.game_number}, {self.team1_score}-{self.team2_score})"


class Match:
    def __init__(self, id, team1_id=None, team2_id=None, games=None, winning_side=None,
                 status='in-progress', team1_name=None, team2_name=None, game_type='doubles'):
        self.id = id
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.team1_name = team1_name
        self.team2_name = team2_name
        self.games = list(games) if games else []
        self.winning_side = winning_side
        self.status = status
        self.game_type = game_type

    def to_dict(self):
        return {
            'id': self.id,
            'team1_id': self.team1_id,
            'team2_id': self.team2_id,
            'team1_name': self.team1_name,
            'team2_name': self.team2_name,
            'games': [g.to_dict() for g in self.games],
            'winning_side': self.winning_side,
            'status': self.status,
            'game_type': self.game_type,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            team1_id=data.get('team1_id'),
            team2_id=data.get('team2_id'),
            games=[GameResult.from_dict(g) for g in data.get('games', [])],
            winning_side=data.get('winning_side'),
            status=data.get('status', 'in-progress'),
            team1_name=data.get('team1_name'),
            team2_name=data.get('team2_name'),
            game_type=data.get('game_type', 'doubles'),
        )

    def __repr__(self):
        return f"Match(id={self.id}, {self.team1_id} vs {self.team2_id}, status={self.status})"


class Registration:
    def __init__(self, user_id, partner_name=None, skill_rating=None, status='pending',
                 registered_at=None, team_id=None):
        self.user_id = user_id
        self.partner_name = partner_name
        self.skill_rating = skill_rating
        self.status = status
        self.registered_at = parse_timestamp(registered_at)
        self.team_id = team_id

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'partner_name': self.partner_name,
            'skill_rating': self.skill_rating,
            'status': self.status,
            'registered_at': format_timestamp(self.registered_at),
            'team_id': self.team_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            user_id=data['user_id'],
            partner_name=data.get('partner_name'),
            skill_rating=data.get('skill_rating'),
            status=data.get('status', 'pending'),
            registered_at=data.get('registered_at'),
            team_id=data.get('team_id'),
        )

    def __repr__(self):
        return f"Registration(user_id={self.user_id}, status={self.status}, skill_rating={self.skill_rating})"


class RecentResult:
    def __init__(self, result, opponent_tier='beginner', completed_at=None, game_type='doubles'):
        self.result = result
        self.opponent_tier = opponent_tier
        self.completed_at = parse_timestamp(completed_at)
        self.game_type = game_type

    @property
    def is_win(self):
        return self.result == 'win'

    def to_dict(self):
        return {
            'result': self.result,
            'opponent_tier': self.opponent_tier,
            'completed_at': format_timestamp(self.completed_at),
            'game_type': self.game_type,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            result=data['result'],
            opponent_tier=data.get('opponent_tier', 'beginner'),
            completed_at=data.get('completed_at'),
            game_type=data.get('game_type', 'doubles'),
        )

    def __repr__(self):
        return f"RecentResult(result={self.result}, opponent_tier={self.opponent_tier})"
