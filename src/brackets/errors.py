"""
Errors raised by the bracket engine.

Every error is a rejected operation: it is raised before anything is mutated,
so the bracket a caller passed in is left exactly as it was.
"""


class BracketError(Exception):
    """Base class for all bracket engine errors."""


class InvalidInput(BracketError):
    """Bad generation parameters (too few participants, duplicates, unknown format...)."""


class MatchNotFound(BracketError):
    def __init__(self, match_id):
        super().__init__(f"Match {match_id!r} does not exist in this bracket")
        self.match_id = match_id


class MatchAlreadyCompleted(BracketError):
    def __init__(self, match_id):
        super().__init__(f"Match {match_id!r} has already been reported")
        self.match_id = match_id


class InvalidWinner(BracketError):
    """The reported winner is not one of the match's two occupants."""


class SlotAlreadyOccupied(BracketError):
    """A downstream slot was already filled (double report or a racing writer)."""

    def __init__(self, match_id, slot, occupant):
        super().__init__(
            f"Slot {slot} of match {match_id!r} is already occupied by {occupant!r}"
        )
        self.match_id = match_id
        self.slot = slot
        self.occupant = occupant


class TournamentNotFound(BracketError):
    def __init__(self, tournament_id):
        super().__init__(f"No bracket stored for tournament {tournament_id!r}")
        self.tournament_id = tournament_id


class BracketExists(BracketError):
    def __init__(self, tournament_id):
        super().__init__(
            f"Tournament {tournament_id!r} already has a bracket; pass replace=True to regenerate it"
        )
        self.tournament_id = tournament_id
