"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset (skips exhaustive field-size sweeps)
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from brackets.progression import report_result


def _play_out(bracket, choose=None):
    """
    Report every ready match, wave by wave, until nothing is left to play.

    choose(match) picks the winner (defaults to the slot A player).
    Returns the number of waves played.
    """
    waves = 0
    while True:
        ready = bracket.ready_matches()
        if not ready:
            return waves
        waves += 1
        for match in ready:
            winner = choose(match) if choose else match.slot_a
            report_result(bracket, match.id, winner)


@pytest.fixture
def play_out():
    return _play_out


@pytest.fixture
def four_players():
    return ['p1', 'p2', 'p3', 'p4']


@pytest.fixture
def five_players():
    return ['p1', 'p2', 'p3', 'p4', 'p5']


@pytest.fixture
def eight_players():
    return [f'p{i}' for i in range(1, 9)]


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the web app at an empty temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'LOCK_TIMEOUT', 1)
    return str(data_dir)


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
