"""
Match progression: applying reported results to an existing bracket.

reporting a result:
- completes the match and records winner, loser and optional score
- seats the winner in the slot named by ``advances_winner_to``
- seats the loser in the slot named by ``advances_loser_to`` (double elimination)
- auto-completes any downstream match that now faces a bye, cascading onward

All changes are staged on copies and only written back into the bracket once
the whole chain has succeeded, so a rejected report leaves the bracket intact.

The engine does no locking. Callers must serialize reports per tournament.
"""
import copy
import logging
from typing import Dict, List, NamedTuple, Sequence

from .errors import InvalidInput, InvalidWinner, MatchAlreadyCompleted, SlotAlreadyOccupied
from .models import (
    BYE, COMPLETED, GRAND_FINAL, READY, ROUND_ROBIN, Bracket, Match,
)

logger = logging.getLogger(__name__)


class ProgressionResult(NamedTuple):
    mutated_matches: List[Match]
    tournament_complete: bool


class _Transaction:
    """Copy-on-write view of a bracket. Nothing touches the bracket until commit()."""

    def __init__(self, bracket: Bracket):
        self.bracket = bracket
        self.staged: Dict[str, Match] = {}

    def get(self, match_id) -> Match:
        if match_id not in self.staged:
            self.staged[match_id] = copy.copy(self.bracket.get(match_id))
        return self.staged[match_id]

    def commit(self) -> List[Match]:
        for match in self.staged.values():
            self.bracket.replace(match)
        return sorted(self.staged.values(), key=lambda m: m.sequence_number)


def _place(txn: _Transaction, match_id, slot: int, participant):
    match = txn.get(match_id)
    occupant = match.slot(slot)
    if occupant is not None or match.status == COMPLETED:
        raise SlotAlreadyOccupied(match_id, slot, occupant)
    match.set_slot(slot, participant)
    logger.debug(f"Seated {participant} in slot {slot} of {match_id}")

    if match.slot_a is None or match.slot_b is None:
        return
    if BYE in (match.slot_a, match.slot_b):
        _resolve_bye(txn, match)
    else:
        match.status = READY


def _resolve_bye(txn: _Transaction, match: Match):
    """Complete a match that faces a bye and push its outcome downstream.

    A match with two byes completes void: no winner, and a bye moves on in
    its place.
    """
    real = match.participants
    match.status = COMPLETED
    match.is_bye = True
    match.winner_id = real[0] if real else None
    match.loser_id = None

    if match.advances_winner_to is not None:
        _place(txn, match.advances_winner_to, match.advances_winner_slot,
               match.winner_id if match.winner_id is not None else BYE)
    if match.advances_loser_to is not None:
        _place(txn, match.advances_loser_to, match.advances_loser_slot, BYE)


def settle_byes(bracket: Bracket) -> List[Match]:
    """Resolve every match that already faces a bye (used right after generation)."""
    txn = _Transaction(bracket)
    for original in bracket.matches:
        match = txn.get(original.id)
        if match.status == COMPLETED:
            continue
        if match.slot_a is None or match.slot_b is None:
            continue
        if BYE in (match.slot_a, match.slot_b):
            _resolve_bye(txn, match)
    return txn.commit()


def _validate_score(score):
    if score is None:
        return None
    if isinstance(score, (str, bytes)) or not isinstance(score, Sequence) or len(score) != 2:
        raise InvalidInput(f"Score must be a pair [slot_a, slot_b], got {score!r}")
    for value in score:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidInput(f"Score values must be non-negative integers, got {score!r}")
    return list(score)


def report_result(bracket: Bracket, match_id, winner_id, score=None) -> ProgressionResult:
    """
    Record the winner of a match and propagate the outcome.

    Args:
        bracket: Bracket to update in place
        match_id: id of the match being reported
        winner_id: one of the two participants seated in the match
        score: optional [slot_a score, slot_b score]

    Returns:
        ProgressionResult with every match that changed (reported match first,
        then downstream matches in sequence order) and whether the tournament is
        now complete.
    """
    match = bracket.get(match_id)
    if match.status == COMPLETED:
        raise MatchAlreadyCompleted(match_id)
    if match.status != READY:
        raise InvalidWinner(f"Match {match_id!r} is not ready: its opponents are not yet decided")
    if winner_id not in (match.slot_a, match.slot_b):
        raise InvalidWinner(
            f"{winner_id!r} is not playing in match {match_id!r} "
            f"({match.slot_a!r} vs {match.slot_b!r})"
        )
    score = _validate_score(score)

    txn = _Transaction(bracket)
    target = txn.get(match_id)
    loser_id = target.slot_b if winner_id == target.slot_a else target.slot_a
    target.status = COMPLETED
    target.winner_id = winner_id
    target.loser_id = loser_id
    target.score = score

    if target.advances_winner_to is not None:
        _place(txn, target.advances_winner_to, target.advances_winner_slot, winner_id)
    if target.advances_loser_to is not None:
        _place(txn, target.advances_loser_to, target.advances_loser_slot, loser_id)

    mutated = txn.commit()
    mutated.sort(key=lambda m: (m.id != match_id, m.sequence_number))
    complete = bracket.is_complete
    if complete:
        logger.info(f"Tournament {bracket.tournament_id} complete, champion {bracket.champion}")
    return ProgressionResult(mutated, complete)


def _elimination_rank(match: Match) -> int:
    """Higher means the participant lasted longer."""
    # Winners-bracket losses in double elimination drop down instead of
    # eliminating, so only winners (single), losers and grand final matches land here.
    if match.bracket_kind == GRAND_FINAL:
        return 10_000
    return match.round


def standings(bracket: Bracket) -> List[Dict]:
    """
    Placement table for an elimination bracket.

    Each entry has the participant, wins, losses, whether they are eliminated,
    the round and bracket kind of the eliminating match, and a position
    (shared by everyone eliminated in the same round; None while still alive,
    except for the champion of a finished bracket).
    """
    if bracket.format == ROUND_ROBIN:
        raise InvalidInput("Use round_robin.round_robin_standings for round robin brackets")

    table = {p: {'participant': p, 'wins': 0, 'losses': 0, 'eliminated': False,
                 'eliminated_in_round': None, 'eliminated_in': None, 'position': None}
             for p in bracket.participants}
    ranks: Dict = {}

    for match in bracket.matches:
        if match.status != COMPLETED or match.is_bye:
            continue
        table[match.winner_id]['wins'] += 1
        table[match.loser_id]['losses'] += 1
        if match.advances_loser_to is None:
            entry = table[match.loser_id]
            entry['eliminated'] = True
            entry['eliminated_in_round'] = match.round
            entry['eliminated_in'] = match.bracket_kind
            ranks[match.loser_id] = _elimination_rank(match)

    if bracket.is_complete:
        table[bracket.champion]['position'] = 1

    # Everyone still alive has outlasted every eliminated participant.
    alive = len(table) - len(ranks)
    for participant, rank in ranks.items():
        better = sum(1 for other in ranks.values() if other > rank)
        table[participant]['position'] = alive + better + 1

    return sorted(table.values(),
                  key=lambda e: (e['position'] is None, e['position'] or 0, str(e['participant'])))
