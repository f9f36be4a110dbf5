"""
Bracket advancement and retroactive score edits.
"""
import logging
from typing import Optional, Sequence

from .models import BracketSlot

logger = logging.getLogger(__name__)


class BracketAdvance:
    """Instruction to write ``team_id`` into ``field`` of slot ``slot_id``."""

    def __init__(self, slot_id, field, team_id):
        self.slot_id = slot_id
        self.field = field
        self.team_id = team_id

    def to_dict(self):
        return {'slot_id': self.slot_id, 'field': self.field, 'team_id': self.team_id}

    def __eq__(self, other):
        if not isinstance(other, BracketAdvance):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"BracketAdvance(slot_id={self.slot_id}, field={self.field}, team_id={self.team_id})"


class RescoreCheck:
    def __init__(self, safe, message=None):
        self.safe = safe
        self.message = message

    def to_dict(self):
        return {'safe': self.safe, 'message': self.message}

    def __repr__(self):
        return f"RescoreCheck(safe={self.safe}, message={self.message})"


def find_slot(slot_id, all_slots: Sequence[BracketSlot]) -> Optional[BracketSlot]:
    return next((s for s in all_slots if s.id == slot_id), None)


def advancement_field(position: int) -> str:
    """Even positions feed team1_id of the next slot, odd positions feed team2_id."""
    return 'team1_id' if position % 2 == 0 else 'team2_id'


def advance_bracket_winner(current_slot: BracketSlot, winner_team_id,
                           all_slots: Sequence[BracketSlot]) -> Optional[BracketAdvance]:
    """
    Work out where the winner of ``current_slot`` goes next.

    Returns None for the final, and also when the next slot is not among
    ``all_slots`` (it may not be persisted yet).
    """
    if not current_slot.next_slot_id:
        return None

    next_slot = find_slot(current_slot.next_slot_id, all_slots)
    if next_slot is None:
        logger.debug("Next slot %s for %s not found; skipping advancement",
                     current_slot.next_slot_id, current_slot.id)
        return None

    return BracketAdvance(
        slot_id=next_slot.id,
        field=advancement_field(current_slot.position),
        team_id=winner_team_id,
    )


def check_rescore_safety(current_slot: BracketSlot, new_winner_id,
                         all_slots: Sequence[BracketSlot]) -> RescoreCheck:
    """
    Decide whether a decided slot may change its winner.

    Unsafe only when the winner actually changes and the next-round slot
    already has a match started or played with the old winner.
    """
    if current_slot.winner_id is None or current_slot.winner_id == new_winner_id:
        return RescoreCheck(True)

    if not current_slot.next_slot_id:
        return RescoreCheck(True)

    next_slot = find_slot(current_slot.next_slot_id, all_slots)
    if next_slot is None or not next_slot.match_id:
        return RescoreCheck(True)

    logger.info("Rejecting winner change on %s: next slot %s already has match %s",
                current_slot.id, next_slot.id, next_slot.match_id)
    return RescoreCheck(
        False,
        "Cannot change the winner: the next-round match has already started. "
        "Reset that match before editing this result.",
    )
