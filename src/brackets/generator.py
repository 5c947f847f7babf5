"""
Single entry point for building a bracket in any supported format.
"""
import random
from typing import Optional, Sequence

from .double_elimination import generate_double_elimination
from .elimination import IdFactory, generate_single_elimination, validate_participants
from .errors import InvalidInput
from .models import (
    DOUBLE_ELIMINATION, RANDOM, ROUND_ROBIN, SEEDED, SEEDING_MODES, SINGLE_ELIMINATION, Bracket,
)
from .round_robin import generate_round_robin


def generate(participants: Sequence, format: str = SINGLE_ELIMINATION, seeding: str = SEEDED,
             tournament_id: str = 'tournament', rng: Optional[random.Random] = None,
             id_factory: Optional[IdFactory] = None) -> Bracket:
    """
    Build the initial bracket for a tournament.

    With seeding="seeded" the result depends only on the arguments: two calls
    with the same inputs produce identical brackets. Pass a seeded
    ``random.Random`` as ``rng`` to make random draws reproducible.
    """
    if format == SINGLE_ELIMINATION:
        return generate_single_elimination(participants, tournament_id, seeding, rng, id_factory)
    if format == DOUBLE_ELIMINATION:
        return generate_double_elimination(participants, tournament_id, seeding, rng, id_factory)
    if format == ROUND_ROBIN:
        if seeding not in SEEDING_MODES:
            raise InvalidInput(f"Unknown seeding mode: {seeding!r}")
        participants = validate_participants(participants)
        if seeding == RANDOM:
            (rng or random.Random()).shuffle(participants)
        return generate_round_robin(participants, tournament_id, id_factory)
    raise InvalidInput(f"Unknown tournament format: {format!r}")
