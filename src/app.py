"""
Flask web application exposing the bracket engine as a JSON API.
"""
import os
import random

from flask import Flask, jsonify, request

from brackets.errors import (
    BracketError, BracketExists, InvalidInput, InvalidWinner, MatchAlreadyCompleted,
    MatchNotFound, SlotAlreadyOccupied, TournamentNotFound,
)
from brackets.models import ROUND_ROBIN
from brackets.progression import standings
from brackets.round_robin import round_robin_standings
from config import load_config
from store import BracketStore

app = Flask(__name__)

CONFIG = load_config()
DATA_DIR = CONFIG['data_dir']
LOCK_TIMEOUT = CONFIG['lock_timeout']

ERROR_STATUS = {
    InvalidInput: 400,
    InvalidWinner: 400,
    MatchNotFound: 404,
    TournamentNotFound: 404,
    MatchAlreadyCompleted: 409,
    SlotAlreadyOccupied: 409,
    BracketExists: 409,
}


def get_store() -> BracketStore:
    return BracketStore(DATA_DIR, LOCK_TIMEOUT)


@app.errorhandler(BracketError)
def handle_bracket_error(error):
    status = ERROR_STATUS.get(type(error), 400)
    app.logger.warning(f'Rejected {request.method} {request.path}: {error}')
    return jsonify({'success': False, 'error': str(error)}), status


def _bracket_payload(bracket) -> dict:
    payload = bracket.to_dict()
    payload['champion'] = bracket.champion
    payload['current_round'] = bracket.current_round
    payload['ready'] = [m.id for m in bracket.ready_matches()]
    return payload


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['POST'])
def api_create_bracket(tournament_id):
    """Generate (or with replace=true, regenerate) a tournament's bracket."""
    data = request.get_json(silent=True) or {}
    participants = data.get('participants')
    if not isinstance(participants, list):
        raise InvalidInput('participants must be a list of ids')

    format = data.get('format', CONFIG['format'])
    seeding = data.get('seeding', CONFIG['seeding'])
    random_seed = data.get('random_seed', CONFIG['random_seed'])
    rng = random.Random(random_seed) if random_seed is not None else None

    bracket = get_store().create(tournament_id, participants, format, seeding,
                                 rng=rng, replace=bool(data.get('replace', False)))
    app.logger.info(f'Created {format} bracket for {tournament_id}')
    return jsonify({'success': True, 'bracket': _bracket_payload(bracket)}), 201


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['GET'])
def api_get_bracket(tournament_id):
    bracket = get_store().load(tournament_id)
    return jsonify({'success': True, 'bracket': _bracket_payload(bracket)})


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>/result', methods=['POST'])
def api_report_result(tournament_id, match_id):
    """Report the winner of a match; returns only the matches that changed."""
    data = request.get_json(silent=True) or {}
    winner_id = data.get('winner_id')
    if winner_id is None:
        raise InvalidInput('winner_id is required')

    result = get_store().report(tournament_id, match_id, winner_id, data.get('score'))
    return jsonify({
        'success': True,
        'mutated_matches': [m.to_dict() for m in result.mutated_matches],
        'tournament_complete': result.tournament_complete,
    })


@app.route('/api/tournaments/<tournament_id>/standings', methods=['GET'])
def api_standings(tournament_id):
    bracket = get_store().load(tournament_id)
    if bracket.format == ROUND_ROBIN:
        table = round_robin_standings(bracket)
    else:
        table = standings(bracket)
    return jsonify({'success': True, 'complete': bracket.is_complete, 'standings': table})


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
