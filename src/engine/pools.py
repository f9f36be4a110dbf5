"""
Pool play: snake-draft pool assignment and round-robin scheduling.
"""
import logging
import string
from typing import List

from .models import Pool, PoolScheduleEntry

logger = logging.getLogger(__name__)

BYE = '__BYE__'


def generate_pools(team_ids: List[str], pool_count: int) -> List[List[str]]:
    """
    Distribute seeded teams into pools using snake-draft ordering.

    Teams should be pre-sorted by seed (index 0 = top seed). The draft walks
    pool 0 -> N-1 -> 0 ..., and the pool at each end receives two teams in a
    row, so for 8 teams in 2 pools: pool 0 gets seeds 1, 4, 5, 8 and pool 1
    gets seeds 2, 3, 6, 7.
    """
    if pool_count < 1:
        return []

    pools = [[] for _ in range(pool_count)]
    direction = 1
    pool_index = 0

    for team_id in team_ids:
        pools[pool_index].append(team_id)

        next_index = pool_index + direction
        if next_index >= pool_count or next_index < 0:
            direction *= -1
        else:
            pool_index = next_index

    return pools


def generate_round_robin_schedule(team_ids: List[str]) -> List[PoolScheduleEntry]:
    """
    Generate a round-robin schedule using the circle method.

    The first team stays fixed while the rest rotate around it.
    For N teams (N even): N-1 rounds, N/2 matches per round.
    For N teams (N odd): N rounds, (N-1)/2 matches per round (one bye per round).
    """
    teams = list(team_ids)
    if len(teams) < 2:
        return []
    if len(teams) % 2 != 0:
        teams.append(BYE)

    n = len(teams)
    schedule = []

    for round_index in range(n - 1):
        for i in range(n // 2):
            if i == 0:
                home = teams[0]
            else:
                home = teams[((round_index + i - 1) % (n - 1)) + 1]
            away = teams[((round_index + (n - 1) - i - 1) % (n - 1)) + 1]

            if home == BYE or away == BYE:
                continue

            schedule.append(PoolScheduleEntry(
                round=round_index + 1,
                team1_id=home,
                team2_id=away,
            ))

    return schedule


def get_pool_name(index: int) -> str:
    """Pool A, Pool B, ..., Pool Z, Pool 27, ..."""
    if index < len(string.ascii_uppercase):
        return f"Pool {string.ascii_uppercase[index]}"
    return f"Pool {index + 1}"


def build_pools(tournament_id, teams, pool_count: int) -> List[Pool]:
    """
    Create scheduled pools for a seeded list of teams.

    Assigns each team's pool_id and attaches a round-robin schedule to
    every pool. Empty pools are kept so the pool count always matches.
    """
    teams_by_id = {team.id: team for team in teams}
    assignments = generate_pools([team.id for team in teams], pool_count)

    pools = []
    for index, pool_team_ids in enumerate(assignments):
        pool_id = f"{tournament_id}-pool-{index + 1}"
        for team_id in pool_team_ids:
            teams_by_id[team_id].pool_id = pool_id
        if len(pool_team_ids) < 2:
            logger.warning("%s has %d team(s); no matches scheduled", get_pool_name(index), len(pool_team_ids))
        pools.append(Pool(
            id=pool_id,
            tournament_id=tournament_id,
            name=get_pool_name(index),
            team_ids=pool_team_ids,
            schedule=generate_round_robin_schedule(pool_team_ids),
        ))

    return pools
