"""
Single elimination bracket generation.

Also holds the pieces double elimination reuses: bracket sizing, participant
validation, bye distribution and the winners-bracket builder.
"""
import logging
import math
import random
from typing import Callable, List, Optional, Sequence

from .errors import InvalidInput
from .models import (
    BYE, GRAND_FINAL, LOSERS, READY, ROUND_ROBIN_KIND, SEEDED, SEEDING_MODES,
    SINGLE_ELIMINATION, RANDOM, WINNERS, Bracket, Match,
)
from .progression import settle_byes

logger = logging.getLogger(__name__)

IdFactory = Callable[[str, str, int], str]

_ID_PREFIXES = {WINNERS: 'wb', LOSERS: 'lb', ROUND_ROBIN_KIND: 'rr'}


def default_match_id(tournament_id: str, bracket_kind: str, sequence_number: int) -> str:
    """Build ids like ``t1_wb_3``, ``t1_lb_9`` and ``t1_grand_final``."""
    if bracket_kind == GRAND_FINAL:
        return f"{tournament_id}_grand_final"
    return f"{tournament_id}_{_ID_PREFIXES[bracket_kind]}_{sequence_number}"


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


def validate_participants(participants) -> List:
    """Check a participant list and return it as a new list.

    Raises InvalidInput for fewer than two entries, empty ids, the bye
    sentinel used as an id, or duplicates.
    """
    if participants is None or isinstance(participants, (str, bytes)):
        raise InvalidInput("Participants must be a sequence of identifiers")
    participants = list(participants)
    if len(participants) < 2:
        raise InvalidInput(f"At least 2 participants are required, got {len(participants)}")

    seen = set()
    for participant in participants:
        if participant is None or participant == '' or isinstance(participant, bool):
            raise InvalidInput(f"Invalid participant id: {participant!r}")
        if participant == BYE:
            raise InvalidInput(f"{BYE!r} is reserved for empty slots")
        if participant in seen:
            raise InvalidInput(f"Duplicate participant: {participant!r}")
        seen.add(participant)
    return participants


def arrange_slots(participants: Sequence, seeding: str = SEEDED,
                  rng: Optional[random.Random] = None) -> List:
    """
    Lay participants out over a power-of-two number of slots.

    Adjacent slots (0,1), (2,3), ... meet in round 1. Byes are interleaved so
    each one faces a real participant: the first ``slot_count - N`` participants
    in order get them. With random seeding the participants are shuffled first.

    For 5 participants: [p1, BYE, p2, BYE, p3, BYE, p4, p5]
    """
    if seeding not in SEEDING_MODES:
        raise InvalidInput(f"Unknown seeding mode: {seeding!r}")

    order = list(participants)
    if seeding == RANDOM:
        (rng or random.Random()).shuffle(order)

    num_byes = calculate_byes(len(order))
    slots = []
    for participant in order[:num_byes]:
        slots.extend([participant, BYE])
    slots.extend(order[num_byes:])
    return slots


class BracketBuilder:
    """Creates matches in sequence order and wires the links between them."""

    def __init__(self, tournament_id: str, id_factory: Optional[IdFactory] = None):
        self.tournament_id = tournament_id
        self.id_factory = id_factory or default_match_id
        self.matches: List[Match] = []
        self._ids = set()

    def new_match(self, bracket_kind: str, round_num: int, round_name: str) -> Match:
        sequence_number = len(self.matches) + 1
        match_id = self.id_factory(self.tournament_id, bracket_kind, sequence_number)
        if match_id in self._ids:
            raise InvalidInput(f"Id factory produced duplicate match id {match_id!r}")
        self._ids.add(match_id)
        match = Match(match_id, self.tournament_id, round_num, sequence_number,
                      bracket_kind, round_name)
        self.matches.append(match)
        return match

    @staticmethod
    def link_winner(source: Match, target: Match, slot: int):
        source.advances_winner_to = target.id
        source.advances_winner_slot = slot

    @staticmethod
    def link_loser(source: Match, target: Match, slot: int):
        source.advances_loser_to = target.id
        source.advances_loser_slot = slot

    def build(self, format: str, participants: List, slot_count: int, seeding: str) -> Bracket:
        bracket = Bracket(self.tournament_id, format, participants, slot_count,
                          self.matches, seeding=seeding)
        settle_byes(bracket)
        return bracket


def build_winners_bracket(builder: BracketBuilder, slots: List,
                          round_namer: Callable[[int], str] = get_round_name) -> List[List[Match]]:
    """
    Create every winners-bracket round and wire winner links.

    Match i of round r feeds slot i % 2 of match i // 2 in round r + 1.
    Returns the rounds as lists of matches, first round first.
    """
    slot_count = len(slots)
    total_rounds = int(math.log2(slot_count))
    rounds: List[List[Match]] = []

    teams_in_round = slot_count
    for round_num in range(1, total_rounds + 1):
        round_name = round_namer(teams_in_round)
        rounds.append([builder.new_match(WINNERS, round_num, round_name)
                       for _ in range(teams_in_round // 2)])
        teams_in_round //= 2

    for i, match in enumerate(rounds[0]):
        match.slot_a, match.slot_b = slots[2 * i], slots[2 * i + 1]
        if match.slot_a == BYE and match.slot_b == BYE:
            raise AssertionError(f"Two byes paired in first-round match {match.id}")
        if BYE not in (match.slot_a, match.slot_b):
            match.status = READY

    for round_idx in range(total_rounds - 1):
        next_round = rounds[round_idx + 1]
        for i, match in enumerate(rounds[round_idx]):
            builder.link_winner(match, next_round[i // 2], i % 2)

    return rounds


def generate_single_elimination(participants: Sequence, tournament_id: str,
                                seeding: str = SEEDED, rng: Optional[random.Random] = None,
                                id_factory: Optional[IdFactory] = None) -> Bracket:
    """
    Generate a single elimination bracket.

    Args:
        participants: Ordered participant ids (the order is the seeding when
            ``seeding`` is "seeded")
        tournament_id: Owning tournament
        seeding: "seeded" keeps the given order, "random" shuffles with ``rng``
        rng: Random source for random seeding (seed it for reproducible draws)
        id_factory: Callable (tournament_id, bracket_kind, sequence_number) -> id

    Returns:
        Bracket with slot_count - 1 matches; first-round byes are already
        completed and their winners seated in round 2.
    """
    participants = validate_participants(participants)
    slots = arrange_slots(participants, seeding, rng)

    builder = BracketBuilder(tournament_id, id_factory)
    build_winners_bracket(builder, slots)
    bracket = builder.build(SINGLE_ELIMINATION, participants, len(slots), seeding)

    logger.info(f"Generated {SINGLE_ELIMINATION} bracket for {tournament_id}: "
                f"{len(participants)} participants, {len(slots)} slots, {len(bracket)} matches")
    return bracket
