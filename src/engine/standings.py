"""
Pool standings from completed match results.
"""
from typing import Callable, List, Optional, Sequence, Tuple

from .models import GameResult, Match, PoolStanding

TeamProjector = Callable[[Match], Tuple[Optional[str], Optional[str]]]


def match_team_ids(match: Match) -> Tuple[Optional[str], Optional[str]]:
    """Default projector: the tournament team ids recorded on the match."""
    return match.team1_id, match.team2_id


def match_team_names(match: Match) -> Tuple[Optional[str], Optional[str]]:
    """Projector for casual matches that only carry display names."""
    return match.team1_name, match.team2_name


def standing_sort_key(standing: PoolStanding):
    """Wins (desc), then point differential (desc)."""
    return (-standing.wins, -standing.point_diff)


def calculate_standings(team_ids: Sequence[str], matches: Sequence[Match],
                        projector: TeamProjector = match_team_ids) -> List[PoolStanding]:
    """
    Calculate standings for a set of teams from completed matches.

    ``projector`` maps a match to its (team1, team2) identifiers so the same
    aggregation serves pool schedules and ad-hoc match records.

    Only matches with status 'completed' count. A team earns a win when its
    side equals the match's winning side and a loss otherwise. Teams with no
    matches still get an all-zero row. Sorted by wins, then point
    differential; remaining ties keep input order.
    """
    completed = [m for m in matches if m.status == 'completed']
    standings = []

    for team_id in team_ids:
        standing = PoolStanding(team_id)

        for match in completed:
            team1, team2 = projector(match)
            is_team1 = team1 == team_id
            is_team2 = team2 == team_id
            if not is_team1 and not is_team2:
                continue

            for game in match.games:
                if is_team1:
                    standing.points_for += game.team1_score
                    standing.points_against += game.team2_score
                else:
                    standing.points_for += game.team2_score
                    standing.points_against += game.team1_score

            if is_team1 and match.winning_side == 1:
                standing.wins += 1
            elif is_team2 and match.winning_side == 2:
                standing.wins += 1
            else:
                standing.losses += 1

        standings.append(standing)

    # sorted() is stable, so equal records keep the order of team_ids
    return sorted(standings, key=standing_sort_key)


def derive_winner_from_games(games: Sequence[GameResult]) -> Optional[int]:
    """Return 1 if team 1 won the majority of games, 2 otherwise, None with no games."""
    if not games:
        return None

    team1_wins = 0
    team2_wins = 0
    for game in games:
        if game.team1_score > game.team2_score:
            team1_wins += 1
        else:
            team2_wins += 1

    return 1 if team1_wins > team2_wins else 2
