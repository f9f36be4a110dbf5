"""
Single elimination bracket generation and cross-pool seeding.
"""
import math
from typing import List, Optional, Sequence

from .models import BracketSlot, PoolStanding
from .standings import standing_sort_key


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_teams) - num_teams


def calculate_total_rounds(num_teams: int) -> int:
    if num_teams < 2:
        return 0
    return int(math.log2(calculate_bracket_size(num_teams)))


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order (1-based seeds).

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Every pair is seed i against seed size+1-i, and seeds 1 and 2 sit in
    opposite halves so they can only meet in the final.
    """
    if bracket_size == 2:
        return [1, 2]

    half_size = bracket_size // 2
    upper_half = _generate_bracket_order(half_size)
    lower_half = [bracket_size + 1 - seed for seed in upper_half]

    result = []
    for u, l in zip(upper_half, lower_half):
        result.extend([u, l])

    return result


def generate_bracket(tournament_id, seeded_team_ids: Sequence[str]) -> List[BracketSlot]:
    """
    Generate a single-elimination bracket.

    Teams are ordered by seed (index 0 = top seed). Non-power-of-2 counts get
    byes (None team fields). Slots are returned round by round; every slot
    outside the final points at slot ``position // 2`` of the next round.
    Fewer than two teams produce no slots.
    """
    num_teams = len(seeded_team_ids)
    total_rounds = calculate_total_rounds(num_teams)
    if total_rounds == 0:
        return []

    bracket_size = calculate_bracket_size(num_teams)
    teams: List[Optional[str]] = list(seeded_team_ids) + [None] * (bracket_size - num_teams)

    slots = []
    slots_by_round = []
    slot_counter = 0

    for round_number in range(1, total_rounds + 1):
        matches_in_round = bracket_size // (2 ** round_number)
        round_slots = []
        for position in range(matches_in_round):
            round_slots.append(BracketSlot(
                id=f"slot-{slot_counter}",
                tournament_id=tournament_id,
                round=round_number,
                position=position,
            ))
            slot_counter += 1
        slots_by_round.append(round_slots)
        slots.extend(round_slots)

    for current_round, next_round in zip(slots_by_round, slots_by_round[1:]):
        for position, slot in enumerate(current_round):
            slot.next_slot_id = next_round[position // 2].id

    bracket_order = _generate_bracket_order(bracket_size)
    for position, slot in enumerate(slots_by_round[0]):
        seed1 = bracket_order[position * 2]
        seed2 = bracket_order[position * 2 + 1]
        slot.team1_id = teams[seed1 - 1]
        slot.team2_id = teams[seed2 - 1]

    return slots


def seed_bracket_from_pools(pool_standings: Sequence[Sequence[PoolStanding]],
                            teams_per_pool_advancing: int) -> List[str]:
    """
    Create the seeded bracket entry list from pool standings.

    Seeding is done by pool finish position:
    - All 1st place finishers get top seeds
    - All 2nd place finishers get next seeds
    - etc.

    Within a finish position, teams are ordered by wins then point
    differential; ties keep pool order. Each pool's standings must already be
    sorted.
    """
    seeded = []
    if not pool_standings:
        return seeded

    for rank in range(teams_per_pool_advancing):
        teams_at_rank = [pool[rank] for pool in pool_standings if rank < len(pool)]
        teams_at_rank.sort(key=standing_sort_key)
        seeded.extend(standing.team_id for standing in teams_at_rank)

    return seeded
