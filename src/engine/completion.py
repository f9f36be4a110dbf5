"""
Completion checks that gate tournament phase transitions.
"""
from typing import Optional, Sequence

from .models import BracketSlot, Pool

TOURNAMENT_STATUSES = ('setup', 'registration', 'pool-play', 'bracket', 'completed', 'paused', 'cancelled')
TERMINAL_STATUSES = ('completed', 'cancelled')

PHASE_ORDER = {
    'round-robin': ('setup', 'registration', 'pool-play', 'completed'),
    'single-elimination': ('setup', 'registration', 'bracket', 'completed'),
    'pool-bracket': ('setup', 'registration', 'pool-play', 'bracket', 'completed'),
}

MIN_TEAMS = 2


class ValidationResult:
    def __init__(self, valid, message=None):
        self.valid = valid
        self.message = message

    def to_dict(self):
        return {'valid': self.valid, 'message': self.message}

    def __repr__(self):
        return f"ValidationResult(valid={self.valid}, message={self.message})"


class BracketValidationResult(ValidationResult):
    def __init__(self, valid, message=None, champion_id=None):
        super().__init__(valid, message)
        self.champion_id = champion_id

    def to_dict(self):
        return {'valid': self.valid, 'message': self.message, 'champion_id': self.champion_id}


class TransitionCheck:
    def __init__(self, allowed, message=None, champion_id=None):
        self.allowed = allowed
        self.message = message
        self.champion_id = champion_id

    def to_dict(self):
        return {'allowed': self.allowed, 'message': self.message, 'champion_id': self.champion_id}

    def __repr__(self):
        return f"TransitionCheck(allowed={self.allowed}, message={self.message})"


def validate_pool_completion(pools: Sequence[Pool]) -> ValidationResult:
    """Every schedule entry in every pool must have a match. Reports the first incomplete pool."""
    for pool in pools:
        incomplete = [entry for entry in pool.schedule if not entry.match_id]
        if incomplete:
            return ValidationResult(False, f"{len(incomplete)} match(es) in {pool.name} not yet played.")
    return ValidationResult(True)


def validate_bracket_completion(slots: Sequence[BracketSlot]) -> BracketValidationResult:
    """The final (highest round) slot must have a winner, who is the champion."""
    if not slots:
        return BracketValidationResult(False, 'No bracket slots found.')

    max_round = max(slot.round for slot in slots)
    final_slot = next(slot for slot in slots if slot.round == max_round)

    if not final_slot.winner_id:
        return BracketValidationResult(False, 'The final match has not been completed yet.')

    return BracketValidationResult(True, champion_id=final_slot.winner_id)


def next_phase(tournament_format: str, status: str) -> Optional[str]:
    """Return the phase that follows ``status`` for the format, or None."""
    order = PHASE_ORDER.get(tournament_format)
    if order is None or status not in order:
        return None
    index = order.index(status)
    if index + 1 >= len(order):
        return None
    return order[index + 1]


def check_phase_transition(tournament_format: str, current_status: str, target_status: str,
                           team_count: int = 0, pools: Sequence[Pool] = (),
                           slots: Sequence[BracketSlot] = (),
                           paused_from: Optional[str] = None) -> TransitionCheck:
    """
    Decide whether a tournament may move from ``current_status`` to ``target_status``.

    Phases follow PHASE_ORDER for the format, one step at a time. Leaving
    registration needs at least two teams, leaving pool play needs every
    pool match recorded, and completing a bracket needs a decided final.
    Any live tournament may be paused or cancelled; a paused one only
    resumes to the status it was paused from.
    """
    if tournament_format not in PHASE_ORDER:
        return TransitionCheck(False, f"Unknown tournament format: {tournament_format}.")

    if target_status not in TOURNAMENT_STATUSES:
        return TransitionCheck(False, f"Unknown tournament status: {target_status}.")

    if current_status in TERMINAL_STATUSES:
        return TransitionCheck(False, f"Tournament is already {current_status}.")

    if target_status == 'cancelled':
        return TransitionCheck(True)

    if current_status == 'paused':
        if target_status == paused_from:
            return TransitionCheck(True)
        return TransitionCheck(False, f"A paused tournament can only resume to {paused_from or 'its previous phase'}.")

    if target_status == 'paused':
        return TransitionCheck(True)

    expected = next_phase(tournament_format, current_status)
    if expected != target_status:
        return TransitionCheck(False, f"Cannot move from {current_status} to {target_status}.")

    if current_status == 'registration' and team_count < MIN_TEAMS:
        return TransitionCheck(False, f"At least {MIN_TEAMS} teams are needed; only {team_count} formed.")

    if current_status == 'pool-play':
        pool_result = validate_pool_completion(pools)
        if not pool_result.valid:
            return TransitionCheck(False, pool_result.message)

    if current_status == 'bracket':
        bracket_result = validate_bracket_completion(slots)
        if not bracket_result.valid:
            return TransitionCheck(False, bracket_result.message)
        return TransitionCheck(True, champion_id=bracket_result.champion_id)

    return TransitionCheck(True)
