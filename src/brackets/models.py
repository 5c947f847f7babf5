"""
Data model for elimination brackets.

A Bracket is a flat, ordered list of Match objects (ordered by sequence number)
plus an id index. Matches reference each other by id through their
``advances_winner_to`` / ``advances_loser_to`` links, and each link names the
slot (0 = slot A, 1 = slot B) it feeds.
"""
from typing import Dict, List, Optional

from .errors import MatchNotFound

BYE = 'BYE'

SINGLE_ELIMINATION = 'single_elimination'
DOUBLE_ELIMINATION = 'double_elimination'
ROUND_ROBIN = 'round_robin'
FORMATS = (SINGLE_ELIMINATION, DOUBLE_ELIMINATION, ROUND_ROBIN)

SEEDED = 'seeded'
RANDOM = 'random'
SEEDING_MODES = (SEEDED, RANDOM)

WINNERS = 'winners'
LOSERS = 'losers'
GRAND_FINAL = 'grand_final'
ROUND_ROBIN_KIND = 'round_robin'
BRACKET_KINDS = (WINNERS, LOSERS, GRAND_FINAL, ROUND_ROBIN_KIND)

PENDING = 'pending'
READY = 'ready'
COMPLETED = 'completed'


class Match:
    """One game between the occupants of slot A and slot B.

    A completed match normally has a winner. The exception is a losers-bracket
    match that received a bye in both slots: it is completed with
    ``is_bye`` set and ``winner_id`` None, and a bye moves on in its place.
    """

    def __init__(self, id, tournament_id, round, sequence_number, bracket_kind,
                 round_name=None):
        self.id = id
        self.tournament_id = tournament_id
        self.round = round
        self.sequence_number = sequence_number
        self.bracket_kind = bracket_kind
        self.round_name = round_name
        self.slot_a = None
        self.slot_b = None
        self.winner_id = None
        self.loser_id = None
        self.score = None
        self.status = PENDING
        self.is_bye = False
        self.advances_winner_to = None
        self.advances_winner_slot = None
        self.advances_loser_to = None
        self.advances_loser_slot = None
        # Scheduling metadata; stored and serialized, never read by the engine.
        self.scheduled_time = None
        self.location = None

    def slot(self, index: int):
        return self.slot_a if index == 0 else self.slot_b

    def set_slot(self, index: int, participant):
        if index == 0:
            self.slot_a = participant
        else:
            self.slot_b = participant

    @property
    def participants(self) -> List:
        """Real participants currently seated in this match (byes excluded)."""
        return [p for p in (self.slot_a, self.slot_b) if p is not None and p != BYE]

    @property
    def is_terminal(self) -> bool:
        return self.advances_winner_to is None

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'round': self.round,
            'round_name': self.round_name,
            'sequence_number': self.sequence_number,
            'bracket_kind': self.bracket_kind,
            'slot_a': self.slot_a,
            'slot_b': self.slot_b,
            'winner_id': self.winner_id,
            'loser_id': self.loser_id,
            'score': list(self.score) if self.score is not None else None,
            'status': self.status,
            'is_bye': self.is_bye,
            'advances_winner_to': self.advances_winner_to,
            'advances_winner_slot': self.advances_winner_slot,
            'advances_loser_to': self.advances_loser_to,
            'advances_loser_slot': self.advances_loser_slot,
            'scheduled_time': self.scheduled_time,
            'location': self.location,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        match = cls(
            id=data['id'],
            tournament_id=data['tournament_id'],
            round=data['round'],
            sequence_number=data['sequence_number'],
            bracket_kind=data['bracket_kind'],
            round_name=data.get('round_name'),
        )
        match.slot_a = data.get('slot_a')
        match.slot_b = data.get('slot_b')
        match.winner_id = data.get('winner_id')
        match.loser_id = data.get('loser_id')
        score = data.get('score')
        match.score = list(score) if score is not None else None
        match.status = data.get('status', PENDING)
        match.is_bye = data.get('is_bye', False)
        match.advances_winner_to = data.get('advances_winner_to')
        match.advances_winner_slot = data.get('advances_winner_slot')
        match.advances_loser_to = data.get('advances_loser_to')
        match.advances_loser_slot = data.get('advances_loser_slot')
        match.scheduled_time = data.get('scheduled_time')
        match.location = data.get('location')
        return match

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Match(id={self.id}, kind={self.bracket_kind}, round={self.round}, "
                f"slots=({self.slot_a}, {self.slot_b}), status={self.status}, "
                f"winner={self.winner_id})")


class Bracket:
    """All matches of one tournament, partitioned by bracket kind."""

    def __init__(self, tournament_id, format, participants, slot_count, matches=None,
                 seeding=SEEDED):
        self.tournament_id = tournament_id
        self.format = format
        self.participants = list(participants)
        self.slot_count = slot_count
        self.seeding = seeding
        self.matches: List[Match] = []
        self._index: Dict[str, int] = {}
        for match in matches or []:
            self.add(match)

    def add(self, match: Match):
        self._index[match.id] = len(self.matches)
        self.matches.append(match)

    def get(self, match_id) -> Match:
        try:
            return self.matches[self._index[match_id]]
        except KeyError:
            raise MatchNotFound(match_id) from None

    def __contains__(self, match_id):
        return match_id in self._index

    def __len__(self):
        return len(self.matches)

    def replace(self, match: Match):
        """Swap in a new version of an existing match (same id)."""
        position = self._index.get(match.id)
        if position is None:
            raise MatchNotFound(match.id)
        self.matches[position] = match

    def by_kind(self, kind: str) -> List[Match]:
        return [m for m in self.matches if m.bracket_kind == kind]

    def rounds(self, kind: str = WINNERS) -> Dict[int, List[Match]]:
        """Matches of one bracket kind grouped by round, in sequence order."""
        grouped: Dict[int, List[Match]] = {}
        for match in self.by_kind(kind):
            grouped.setdefault(match.round, []).append(match)
        return dict(sorted(grouped.items()))

    @property
    def total_rounds(self) -> Dict[str, int]:
        """Number of rounds in each bracket kind present."""
        rounds = {}
        for match in self.matches:
            rounds.setdefault(match.bracket_kind, set()).add(match.round)
        return {kind: len(numbers) for kind, numbers in rounds.items()}

    @property
    def terminal_match(self) -> Optional[Match]:
        """The match that decides the tournament (None for round robin)."""
        if self.format == DOUBLE_ELIMINATION:
            finals = self.by_kind(GRAND_FINAL)
            return finals[0] if finals else None
        if self.format == SINGLE_ELIMINATION:
            for match in self.by_kind(WINNERS):
                if match.is_terminal:
                    return match
        return None

    @property
    def is_complete(self) -> bool:
        if self.format == ROUND_ROBIN:
            return bool(self.matches) and all(m.status == COMPLETED for m in self.matches)
        terminal = self.terminal_match
        return terminal is not None and terminal.status == COMPLETED

    @property
    def champion(self):
        if self.format == ROUND_ROBIN or not self.is_complete:
            return None
        return self.terminal_match.winner_id

    def ready_matches(self) -> List[Match]:
        return [m for m in self.matches if m.status == READY]

    @property
    def current_round(self) -> Optional[int]:
        """Lowest round that still holds a playable match."""
        ready = self.ready_matches()
        if not ready:
            return None
        return min(m.round for m in ready)

    def to_dict(self) -> Dict:
        return {
            'tournament_id': self.tournament_id,
            'format': self.format,
            'seeding': self.seeding,
            'participants': list(self.participants),
            'slot_count': self.slot_count,
            'total_rounds': self.total_rounds,
            'is_complete': self.is_complete,
            'matches': [m.to_dict() for m in self.matches],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Bracket':
        return cls(
            tournament_id=data['tournament_id'],
            format=data['format'],
            participants=data.get('participants', []),
            slot_count=data.get('slot_count', 0),
            matches=[Match.from_dict(m) for m in data.get('matches', [])],
            seeding=data.get('seeding', SEEDED),
        )

    def __repr__(self):
        return (f"Bracket(tournament_id={self.tournament_id}, format={self.format}, "
                f"matches={len(self.matches)}, is_complete={self.is_complete})")
