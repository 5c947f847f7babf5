"""
Double elimination bracket generation.

In double elimination:
- Teams must lose twice to be eliminated
- Winners Bracket: Teams that haven't lost yet
- Losers Bracket: Teams that have lost once
- Grand Final: Winners bracket champion vs Losers bracket champion

Only one grand final is played; there is no bracket reset match.
"""
import logging
import math
import random
from typing import List, Optional, Sequence

from .elimination import (
    BracketBuilder,
    IdFactory,
    arrange_slots,
    build_winners_bracket,
    validate_participants,
)
from .models import DOUBLE_ELIMINATION, GRAND_FINAL, LOSERS, SEEDED, Bracket, Match

logger = logging.getLogger(__name__)


def get_losers_round_name(round_num: int, total_losers_rounds: int) -> str:
    """Get the name for a losers bracket round (0-indexed)."""
    rounds_from_end = total_losers_rounds - round_num - 1
    if rounds_from_end == 0:
        return "Losers Final"
    elif rounds_from_end == 1:
        return "Losers Semifinal"
    else:
        return f"Losers Round {round_num + 1}"


def get_winners_round_name(teams_in_round: int) -> str:
    """Get the name for a winners bracket round."""
    if teams_in_round == 2:
        return "Winners Final"
    elif teams_in_round == 4:
        return "Winners Semifinal"
    elif teams_in_round == 8:
        return "Winners Quarterfinal"
    else:
        return f"Winners Round of {teams_in_round}"


def calculate_losers_bracket_rounds(bracket_size: int) -> int:
    """
    Calculate number of rounds in losers bracket.
    For N teams in winners bracket (power of 2):
    - Winners bracket has log2(N) rounds
    - Losers bracket has 2 * (log2(N) - 1) rounds

    Pattern: minor, major, minor, major, ... ending with a major round
    """
    if bracket_size < 2:
        return 0
    winners_rounds = int(math.log2(bracket_size))
    return 2 * (winners_rounds - 1)


def drop_order(num_matches: int, winners_round: int) -> List[int]:
    """
    Where the losers of a winners round land in their losers round.

    Entry i is the losers-round match that the loser of winners match i drops
    into. Even winners rounds are reversed, odd ones swap halves. In the first
    cross-in round (losers of winners round 2) this guarantees the dropped
    player meets a survivor from the other side of the draw. Later cross-ins
    only spread droppers out: a rematch there depends on results and can
    still happen.
    """
    positions = list(range(num_matches))
    if num_matches < 2:
        return positions
    if winners_round % 2 == 0:
        return positions[::-1]
    half = num_matches // 2
    return positions[half:] + positions[:half]


def build_losers_bracket(builder: BracketBuilder, winners_rounds: List[List[Match]]) -> List[List[Match]]:
    """
    Create the losers bracket and wire it to the winners bracket.

    The losers bracket alternates between:
    - Minor rounds (1, 3, 5...): only losers bracket teams compete. Round 1
      pairs the losers of adjacent first-round winners matches.
    - Major rounds (2, 4, 6...): losers from winners round k + 1 drop in
      (slot A) against the survivors of the previous losers round (slot B).

    For 8-team bracket:
    - L Round 1 (minor): 4 W-QF losers pair off -> 2 matches -> 2 winners
    - L Round 2 (major): 2 W-SF losers + 2 L-R1 winners -> 2 matches -> 2 winners
    - L Round 3 (minor): 2 L-R2 winners pair off -> 1 match -> 1 winner
    - L Round 4 (major): 1 W-F loser + 1 L-R3 winner -> 1 match -> 1 winner (L champion)
    """
    total_losers_rounds = calculate_losers_bracket_rounds(2 * len(winners_rounds[0]))
    losers_rounds: List[List[Match]] = []

    for round_num in range(1, total_losers_rounds + 1):
        if round_num == 1:
            num_matches = len(winners_rounds[0]) // 2
        elif round_num % 2 == 0:
            num_matches = len(losers_rounds[-1])
        else:
            num_matches = len(losers_rounds[-1]) // 2
        round_name = get_losers_round_name(round_num - 1, total_losers_rounds)
        losers_rounds.append([builder.new_match(LOSERS, round_num, round_name)
                              for _ in range(num_matches)])

    if not losers_rounds:
        return losers_rounds

    for i, match in enumerate(winners_rounds[0]):
        builder.link_loser(match, losers_rounds[0][i // 2], i % 2)

    for round_idx in range(total_losers_rounds - 1):
        next_round = losers_rounds[round_idx + 1]
        next_is_major = (round_idx + 2) % 2 == 0
        for i, match in enumerate(losers_rounds[round_idx]):
            if next_is_major:
                builder.link_winner(match, next_round[i], 1)
            else:
                builder.link_winner(match, next_round[i // 2], i % 2)

    for winners_round in range(2, len(winners_rounds) + 1):
        major_round = losers_rounds[2 * (winners_round - 1) - 1]
        order = drop_order(len(major_round), winners_round)
        for i, match in enumerate(winners_rounds[winners_round - 1]):
            builder.link_loser(match, major_round[order[i]], 0)

    return losers_rounds


def generate_double_elimination(participants: Sequence, tournament_id: str,
                                seeding: str = SEEDED, rng: Optional[random.Random] = None,
                                id_factory: Optional[IdFactory] = None) -> Bracket:
    """
    Generate a complete double elimination bracket.

    Args:
        participants: Ordered participant ids
        tournament_id: Owning tournament
        seeding: "seeded" keeps the given order, "random" shuffles with ``rng``
        rng: Random source for random seeding
        id_factory: Callable (tournament_id, bracket_kind, sequence_number) -> id

    Returns:
        Bracket with winners, losers and grand final matches
        (2 * slot_count - 2 in total). Byes are already settled in both brackets.
    """
    participants = validate_participants(participants)
    slots = arrange_slots(participants, seeding, rng)

    builder = BracketBuilder(tournament_id, id_factory)
    winners_rounds = build_winners_bracket(builder, slots, get_winners_round_name)
    losers_rounds = build_losers_bracket(builder, winners_rounds)

    final_round = max(len(winners_rounds), len(losers_rounds)) + 1
    grand_final = builder.new_match(GRAND_FINAL, final_round, "Grand Final")
    winners_final = winners_rounds[-1][0]
    builder.link_winner(winners_final, grand_final, 0)
    if losers_rounds:
        builder.link_winner(losers_rounds[-1][0], grand_final, 1)
    else:
        # Two participants: the first loss sends the loser straight to the grand final.
        builder.link_loser(winners_final, grand_final, 1)

    bracket = builder.build(DOUBLE_ELIMINATION, participants, len(slots), seeding)
    logger.info(f"Generated {DOUBLE_ELIMINATION} bracket for {tournament_id}: "
                f"{len(participants)} participants, {len(slots)} slots, "
                f"{len(winners_rounds)} winners rounds, {len(losers_rounds)} losers rounds, "
                f"{len(bracket)} matches")
    return bracket
