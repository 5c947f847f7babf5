"""
YAML-backed bracket storage.

One file per tournament: <data_dir>/<tournament_id>/bracket.yaml. Every
read-modify-write runs under a FileLock for that tournament, and files are
replaced atomically, so all matches mutated by a report are written together
or not at all.
"""
import logging
import os
import re
import tempfile

import yaml
from filelock import FileLock

from brackets.errors import BracketExists, InvalidInput, TournamentNotFound
from brackets.generator import generate
from brackets.models import Bracket
from brackets.progression import ProgressionResult, report_result

logger = logging.getLogger(__name__)

TOURNAMENT_ID_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$')


class BracketStore:
    def __init__(self, data_dir: str, lock_timeout: float = 10):
        self.data_dir = data_dir
        self.lock_timeout = lock_timeout

    def _tournament_dir(self, tournament_id: str) -> str:
        if not isinstance(tournament_id, str) or not TOURNAMENT_ID_PATTERN.match(tournament_id):
            raise InvalidInput(f"Invalid tournament id: {tournament_id!r}")
        return os.path.join(self.data_dir, tournament_id)

    def _bracket_file(self, tournament_id: str) -> str:
        return os.path.join(self._tournament_dir(tournament_id), 'bracket.yaml')

    def lock(self, tournament_id: str) -> FileLock:
        """Per-tournament lock; hold it around any load/modify/save sequence."""
        tournament_dir = self._tournament_dir(tournament_id)
        os.makedirs(tournament_dir, exist_ok=True)
        return FileLock(os.path.join(tournament_dir, '.lock'), timeout=self.lock_timeout)

    def exists(self, tournament_id: str) -> bool:
        return os.path.exists(self._bracket_file(tournament_id))

    def load(self, tournament_id: str) -> Bracket:
        path = self._bracket_file(tournament_id)
        if not os.path.exists(path):
            raise TournamentNotFound(tournament_id)
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if not data:
            raise TournamentNotFound(tournament_id)
        return Bracket.from_dict(data)

    def save(self, bracket: Bracket):
        """Write the whole bracket to a temp file, then swap it into place."""
        path = self._bracket_file(bracket.tournament_id)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path), suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                yaml.safe_dump(bracket.to_dict(), f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def create(self, tournament_id: str, participants, format: str, seeding: str,
               rng=None, replace: bool = False) -> Bracket:
        """Generate and store a bracket. Regenerating discards the old bracket entirely."""
        with self.lock(tournament_id):
            if self.exists(tournament_id) and not replace:
                raise BracketExists(tournament_id)
            bracket = generate(participants, format=format, seeding=seeding,
                               tournament_id=tournament_id, rng=rng)
            self.save(bracket)
        logger.info(f"Stored {format} bracket for {tournament_id} ({len(bracket)} matches)")
        return bracket

    def report(self, tournament_id: str, match_id, winner_id, score=None) -> ProgressionResult:
        """Apply a result under the tournament lock and persist the outcome."""
        with self.lock(tournament_id):
            bracket = self.load(tournament_id)
            result = report_result(bracket, match_id, winner_id, score)
            self.save(bracket)
        return result
