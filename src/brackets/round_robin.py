"""
Round robin generation and standings.

Every pair of participants meets once. Matches are spread over rounds with the
circle method: participant 0 stays put and the rest rotate one place per round,
so nobody plays twice in a round. An odd field adds a bye and whoever draws it
sits the round out (no match is created for it).
"""
import logging
from typing import Dict, List, Optional, Sequence

from .elimination import IdFactory, default_match_id, validate_participants
from .errors import InvalidInput
from .models import BYE, COMPLETED, READY, ROUND_ROBIN, ROUND_ROBIN_KIND, SEEDED, Bracket, Match

logger = logging.getLogger(__name__)


def round_robin_pairings(participants: Sequence) -> List[List[tuple]]:
    """Pairings per round. For 4 players: [[(p1,p4),(p2,p3)], [(p1,p3),(p4,p2)], [(p1,p2),(p3,p4)]]."""
    players = list(participants)
    if len(players) % 2:
        players.append(BYE)
    num_players = len(players)

    rounds = []
    for _ in range(num_players - 1):
        pairs = []
        for i in range(num_players // 2):
            first, second = players[i], players[num_players - 1 - i]
            if BYE not in (first, second):
                pairs.append((first, second))
        rounds.append(pairs)
        players = [players[0], players[-1]] + players[1:-1]
    return rounds


def generate_round_robin(participants: Sequence, tournament_id: str,
                         id_factory: Optional[IdFactory] = None) -> Bracket:
    """Generate a round robin: N * (N - 1) / 2 matches, all ready to play, no links."""
    participants = validate_participants(participants)
    id_factory = id_factory or default_match_id

    matches = []
    ids = set()
    for round_num, pairs in enumerate(round_robin_pairings(participants), start=1):
        for first, second in pairs:
            sequence_number = len(matches) + 1
            match_id = id_factory(tournament_id, ROUND_ROBIN_KIND, sequence_number)
            if match_id in ids:
                raise InvalidInput(f"Id factory produced duplicate match id {match_id!r}")
            ids.add(match_id)
            match = Match(match_id, tournament_id, round_num, sequence_number,
                          ROUND_ROBIN_KIND, f"Round {round_num}")
            match.slot_a, match.slot_b = first, second
            match.status = READY
            matches.append(match)

    bracket = Bracket(tournament_id, ROUND_ROBIN, participants, len(participants), matches,
                      seeding=SEEDED)
    logger.info(f"Generated {ROUND_ROBIN} for {tournament_id}: "
                f"{len(participants)} participants, {len(matches)} matches")
    return bracket


def round_robin_standings(bracket: Bracket) -> List[Dict]:
    """
    Standings table for a round robin.

    Sorted by wins, then points difference, then points scored; tied entries
    share a position. Points only count for matches reported with a score.
    """
    if bracket.format != ROUND_ROBIN:
        raise InvalidInput(f"Not a round robin bracket: {bracket.format}")

    table = {p: {'participant': p, 'wins': 0, 'losses': 0, 'played': 0,
                 'points_for': 0, 'points_against': 0}
             for p in bracket.participants}

    for match in bracket.matches:
        if match.status != COMPLETED:
            continue
        table[match.winner_id]['wins'] += 1
        table[match.loser_id]['losses'] += 1
        for participant in (match.slot_a, match.slot_b):
            table[participant]['played'] += 1
        if match.score:
            score_a, score_b = match.score
            table[match.slot_a]['points_for'] += score_a
            table[match.slot_a]['points_against'] += score_b
            table[match.slot_b]['points_for'] += score_b
            table[match.slot_b]['points_against'] += score_a

    for entry in table.values():
        entry['points_difference'] = entry['points_for'] - entry['points_against']
        entry['win_rate'] = entry['wins'] / entry['played'] if entry['played'] else 0.0

    def sort_key(entry):
        return (-entry['wins'], -entry['points_difference'], -entry['points_for'])

    ordered = sorted(table.values(), key=lambda e: (sort_key(e), str(e['participant'])))
    for index, entry in enumerate(ordered):
        if index and sort_key(entry) == sort_key(ordered[index - 1]):
            entry['position'] = ordered[index - 1]['position']
        else:
            entry['position'] = index + 1
    return ordered
