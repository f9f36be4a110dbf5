"""
A single player's view of a tournament: their team, their matches, their record.
"""
from typing import Dict, List, Optional, Sequence

from .models import BracketSlot, Pool, Registration, Team


def get_player_team_id(user_id, registrations: Sequence[Registration], teams: Sequence[Team]) -> Optional[str]:
    reg = next((r for r in registrations if r.user_id == user_id), None)
    if reg is not None and reg.team_id:
        return reg.team_id
    team = next((t for t in teams if user_id in t.player_ids), None)
    return team.id if team else None


def _opponent(team_id, team1_id, team2_id):
    if team1_id == team_id:
        return team2_id
    if team2_id == team_id:
        return team1_id
    return None


def get_player_matches(team_id, pools: Sequence[Pool], bracket: Sequence[BracketSlot],
                       team_names: Optional[Dict[str, str]] = None) -> List[Dict]:
    """
    List the pool and bracket matches involving ``team_id``.

    Pool entries are 'upcoming' until a match is recorded, then 'completed'.
    Bracket slots are 'completed' once decided (with ``won`` set),
    'in-progress' while a match is attached, and 'upcoming' otherwise.
    Slots where the opponent is still unknown are skipped.
    """
    team_names = team_names or {}
    matches = []

    for pool in pools:
        for entry in pool.schedule:
            opponent_id = _opponent(team_id, entry.team1_id, entry.team2_id)
            if not opponent_id:
                continue
            matches.append({
                'type': 'pool',
                'round': entry.round,
                'opponent_team_id': opponent_id,
                'opponent_name': team_names.get(opponent_id, opponent_id),
                'status': 'completed' if entry.match_id else 'upcoming',
                'match_id': entry.match_id,
                'won': None,
            })

    for slot in bracket:
        opponent_id = _opponent(team_id, slot.team1_id, slot.team2_id)
        if not opponent_id:
            continue

        won = None
        if slot.winner_id:
            status = 'completed'
            won = slot.winner_id == team_id
        elif slot.match_id:
            status = 'in-progress'
        else:
            status = 'upcoming'

        matches.append({
            'type': 'bracket',
            'round': slot.round,
            'opponent_team_id': opponent_id,
            'opponent_name': team_names.get(opponent_id, opponent_id),
            'status': status,
            'match_id': slot.match_id,
            'won': won,
        })

    return matches


def get_player_stats(team_id, pools: Sequence[Pool], bracket: Sequence[BracketSlot]) -> Dict:
    """Combine pool standings with decided bracket slots into one record."""
    wins = 0
    losses = 0
    points_for = 0
    points_against = 0

    for pool in pools:
        standing = next((s for s in pool.standings if s.team_id == team_id), None)
        if standing is not None:
            wins += standing.wins
            losses += standing.losses
            points_for += standing.points_for
            points_against += standing.points_against

    for slot in bracket:
        if not slot.winner_id:
            continue
        if team_id not in (slot.team1_id, slot.team2_id):
            continue
        if slot.winner_id == team_id:
            wins += 1
        else:
            losses += 1

    return {
        'wins': wins,
        'losses': losses,
        'points_for': points_for,
        'points_against': points_against,
        'point_diff': points_for - points_against,
    }
