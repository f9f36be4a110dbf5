"""
Turn registrations into teams once registration closes.

Three modes:
- singles: one team per registration.
- auto-pair: pair players with the closest skill ratings.
- byop (bring your own partner): pair players who named each other.

Every mode reports players it could not place in ``unmatched`` instead of
dropping them, so the organizer can be warned.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Registration, Team

logger = logging.getLogger(__name__)

TEAM_FORMATION_MODES = ('singles', 'auto-pair', 'byop')
DEFAULT_SKILL_RATING = 3.0


class TeamFormationResult:
    def __init__(self, teams, unmatched):
        self.teams = teams
        self.unmatched = unmatched

    def to_dict(self):
        return {
            'teams': [team.to_dict() for team in self.teams],
            'unmatched': [reg.to_dict() for reg in self.unmatched],
        }

    def __repr__(self):
        return f"TeamFormationResult(teams={len(self.teams)}, unmatched={len(self.unmatched)})"


def _team_id(tournament_id, index: int) -> str:
    return f"{tournament_id}-team-{index + 1}"


def _display_name(user_id, user_names: Optional[Dict[str, str]]) -> str:
    return (user_names or {}).get(user_id, user_id)


def _same_name(a: Optional[str], b: Optional[str]) -> bool:
    return a is not None and b is not None and a.strip().lower() == b.strip().lower()


def effective_rating(registration: Registration, default_rating: float = DEFAULT_SKILL_RATING) -> float:
    if registration.skill_rating is None:
        return default_rating
    return registration.skill_rating


def auto_pair_by_rating(registrations: Sequence[Registration],
                        default_rating: float = DEFAULT_SKILL_RATING) -> List[Tuple[Registration, Registration]]:
    """
    Pair players by closest skill rating.

    Sorts by rating (highest first), then pairs adjacent players. Returns
    pairs sorted by average rating, highest first, ready for seeding. With
    an odd count the lowest-rated player is left out.
    """
    if len(registrations) < 2:
        return []

    ordered = sorted(registrations, key=lambda r: -effective_rating(r, default_rating))
    pairs = [(ordered[i], ordered[i + 1]) for i in range(0, len(ordered) - 1, 2)]

    pairs.sort(key=lambda pair: -(effective_rating(pair[0], default_rating) +
                                  effective_rating(pair[1], default_rating)) / 2)
    return pairs


def classify_registrations(registrations: Sequence[Registration],
                           user_names: Dict[str, str]) -> Tuple[List[Tuple[Registration, Registration]], List[Registration]]:
    """
    Split registrations into mutually agreed pairs and everyone else.

    Two players pair only when each one's partner name matches the other's
    display name (case-insensitive). One-sided requests stay unmatched.
    """
    paired = []
    paired_ids = set()

    for reg in registrations:
        if reg.user_id in paired_ids or not reg.partner_name:
            continue

        partner = next((
            other for other in registrations
            if other.user_id not in paired_ids
            and other.user_id != reg.user_id
            and _same_name(user_names.get(other.user_id), reg.partner_name)
            and _same_name(other.partner_name, user_names.get(reg.user_id))
        ), None)

        if partner is not None:
            paired_ids.add(reg.user_id)
            paired_ids.add(partner.user_id)
            paired.append((reg, partner))

    unmatched = [reg for reg in registrations if reg.user_id not in paired_ids]
    return paired, unmatched


def _pair_teams(pairs, tournament_id, user_names) -> List[Team]:
    teams = []
    for index, (first, second) in enumerate(pairs):
        name1 = _display_name(first.user_id, user_names)
        name2 = _display_name(second.user_id, user_names)
        teams.append(Team(
            id=_team_id(tournament_id, index),
            tournament_id=tournament_id,
            name=f"{name1} & {name2}",
            player_ids=[first.user_id, second.user_id],
        ))
    return teams


def create_singles_teams(registrations, tournament_id, user_names=None) -> TeamFormationResult:
    teams = [
        Team(
            id=_team_id(tournament_id, index),
            tournament_id=tournament_id,
            name=(user_names or {}).get(reg.user_id, f"Player {index + 1}"),
            player_ids=[reg.user_id],
        )
        for index, reg in enumerate(registrations)
    ]
    return TeamFormationResult(teams, [])


def create_auto_pair_teams(registrations, tournament_id, user_names=None,
                           default_rating: float = DEFAULT_SKILL_RATING) -> TeamFormationResult:
    pairs = auto_pair_by_rating(registrations, default_rating)
    paired_ids = {reg.user_id for pair in pairs for reg in pair}
    unmatched = [reg for reg in registrations if reg.user_id not in paired_ids]
    return TeamFormationResult(_pair_teams(pairs, tournament_id, user_names), unmatched)


def create_byop_teams(registrations, tournament_id, user_names=None) -> TeamFormationResult:
    pairs, unmatched = classify_registrations(registrations, user_names or {})
    return TeamFormationResult(_pair_teams(pairs, tournament_id, user_names), unmatched)


def create_teams_from_registrations(registrations: Sequence[Registration], tournament_id, mode: str,
                                    user_names: Optional[Dict[str, str]] = None,
                                    default_rating: float = DEFAULT_SKILL_RATING) -> TeamFormationResult:
    """Form teams for ``mode`` ('singles', 'auto-pair' or 'byop')."""
    if mode not in TEAM_FORMATION_MODES:
        raise ValueError(f"Unknown team formation mode: {mode}. Expected one of {', '.join(TEAM_FORMATION_MODES)}")

    if mode == 'singles':
        result = create_singles_teams(registrations, tournament_id, user_names)
    elif mode == 'auto-pair':
        result = create_auto_pair_teams(registrations, tournament_id, user_names, default_rating)
    else:
        result = create_byop_teams(registrations, tournament_id, user_names)

    if result.unmatched:
        logger.info("Tournament %s: %d registration(s) left unmatched in %s mode",
                    tournament_id, len(result.unmatched), mode)
    return result
