"""
Unit tests for Flask web application.
"""
import pytest

BRACKET_URL = '/api/tournaments/spring/bracket'


def result_url(match_id, tournament_id='spring'):
    return f'/api/tournaments/{tournament_id}/matches/{match_id}/result'


@pytest.fixture
def created(client, four_players):
    response = client.post(BRACKET_URL, json={'participants': four_players})
    assert response.status_code == 201
    return response.get_json()['bracket']


class TestCreateBracket:
    """Tests for POST /api/tournaments/<id>/bracket."""

    def test_create_single_elimination(self, created):
        assert created['format'] == 'single_elimination'
        assert [m['id'] for m in created['matches']] == ['spring_wb_1', 'spring_wb_2', 'spring_wb_3']
        assert created['ready'] == ['spring_wb_1', 'spring_wb_2']
        assert created['current_round'] == 1
        assert created['champion'] is None

    def test_create_double_elimination(self, client, eight_players):
        response = client.post(BRACKET_URL, json={
            'participants': eight_players, 'format': 'double_elimination'})
        assert response.status_code == 201
        bracket = response.get_json()['bracket']
        assert len(bracket['matches']) == 14
        assert bracket['total_rounds'] == {'winners': 3, 'losers': 4, 'grand_final': 1}

    def test_create_random_with_seed_is_reproducible(self, client, eight_players):
        payload = {'participants': eight_players, 'seeding': 'random', 'random_seed': 11}
        first = client.post('/api/tournaments/a/bracket', json=payload).get_json()['bracket']
        second = client.post('/api/tournaments/b/bracket', json=payload).get_json()['bracket']
        assert [(m['slot_a'], m['slot_b']) for m in first['matches']] == \
            [(m['slot_a'], m['slot_b']) for m in second['matches']]

    def test_create_twice_conflicts(self, client, created, four_players):
        response = client.post(BRACKET_URL, json={'participants': four_players})
        assert response.status_code == 409
        assert response.get_json()['success'] is False

    def test_replace(self, client, created, five_players):
        response = client.post(BRACKET_URL, json={'participants': five_players, 'replace': True})
        assert response.status_code == 201
        assert len(response.get_json()['bracket']['matches']) == 7

    def test_missing_participants(self, client):
        response = client.post(BRACKET_URL, json={})
        assert response.status_code == 400
        assert 'participants' in response.get_json()['error']

    def test_invalid_participants(self, client):
        response = client.post(BRACKET_URL, json={'participants': ['a', 'a']})
        assert response.status_code == 400

    def test_unknown_format(self, client, four_players):
        response = client.post(BRACKET_URL, json={'participants': four_players, 'format': 'swiss'})
        assert response.status_code == 400

    def test_invalid_tournament_id(self, client, four_players):
        response = client.post('/api/tournaments/-bad/bracket', json={'participants': four_players})
        assert response.status_code == 400


class TestGetBracket:
    """Tests for GET /api/tournaments/<id>/bracket."""

    def test_get(self, client, created):
        response = client.get(BRACKET_URL)
        assert response.status_code == 200
        assert response.get_json()['bracket']['matches'] == created['matches']

    def test_unknown_tournament(self, client):
        response = client.get('/api/tournaments/nothing/bracket')
        assert response.status_code == 404


class TestReportResult:
    """Tests for POST /api/tournaments/<id>/matches/<match_id>/result."""

    def test_report(self, client, created):
        response = client.post(result_url('spring_wb_1'), json={'winner_id': 'p1', 'score': [2, 0]})
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['tournament_complete'] is False
        assert [m['id'] for m in data['mutated_matches']] == ['spring_wb_1', 'spring_wb_3']
        assert data['mutated_matches'][0]['score'] == [2, 0]

        bracket = client.get(BRACKET_URL).get_json()['bracket']
        assert bracket['matches'][2]['slot_a'] == 'p1'

    def test_full_tournament(self, client, created):
        client.post(result_url('spring_wb_1'), json={'winner_id': 'p1'})
        client.post(result_url('spring_wb_2'), json={'winner_id': 'p4'})
        response = client.post(result_url('spring_wb_3'), json={'winner_id': 'p4'})
        assert response.get_json()['tournament_complete'] is True

        bracket = client.get(BRACKET_URL).get_json()['bracket']
        assert bracket['champion'] == 'p4'
        assert bracket['is_complete'] is True
        assert bracket['ready'] == []

    def test_repeat_report_conflicts(self, client, created):
        client.post(result_url('spring_wb_1'), json={'winner_id': 'p1'})
        response = client.post(result_url('spring_wb_1'), json={'winner_id': 'p1'})
        assert response.status_code == 409

    def test_wrong_winner(self, client, created):
        response = client.post(result_url('spring_wb_1'), json={'winner_id': 'p3'})
        assert response.status_code == 400

    def test_missing_winner(self, client, created):
        response = client.post(result_url('spring_wb_1'), json={})
        assert response.status_code == 400

    def test_bad_score(self, client, created):
        response = client.post(result_url('spring_wb_1'), json={'winner_id': 'p1', 'score': 'win'})
        assert response.status_code == 400

    def test_unknown_match(self, client, created):
        response = client.post(result_url('spring_wb_99'), json={'winner_id': 'p1'})
        assert response.status_code == 404

    def test_unknown_tournament(self, client):
        response = client.post(result_url('m1', 'nothing'), json={'winner_id': 'p1'})
        assert response.status_code == 404


class TestStandings:
    """Tests for GET /api/tournaments/<id>/standings."""

    def test_elimination_standings(self, client, created):
        client.post(result_url('spring_wb_1'), json={'winner_id': 'p1'})
        response = client.get('/api/tournaments/spring/standings')
        assert response.status_code == 200
        data = response.get_json()
        assert data['complete'] is False
        by_id = {e['participant']: e for e in data['standings']}
        assert by_id['p2']['eliminated'] is True

    def test_round_robin_standings(self, client, four_players):
        client.post('/api/tournaments/league/bracket',
                    json={'participants': four_players, 'format': 'round_robin'})
        client.post(result_url('league_rr_1', 'league'), json={'winner_id': 'p4', 'score': [1, 3]})
        data = client.get('/api/tournaments/league/standings').get_json()
        assert data['standings'][0]['participant'] == 'p4'
        assert data['standings'][0]['points_for'] == 3

    def test_unknown_tournament(self, client):
        response = client.get('/api/tournaments/nothing/standings')
        assert response.status_code == 404
