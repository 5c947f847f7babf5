"""
Tests for round robin generation and standings.
"""
import random
from itertools import combinations

import pytest

from brackets.errors import InvalidInput, InvalidWinner
from brackets.generator import generate
from brackets.models import READY, ROUND_ROBIN, ROUND_ROBIN_KIND
from brackets.progression import report_result
from brackets.round_robin import generate_round_robin, round_robin_pairings, round_robin_standings


class TestRoundRobinPairings:
    """Tests for the circle-method schedule."""

    def test_four_players(self, four_players):
        assert round_robin_pairings(four_players) == [
            [('p1', 'p4'), ('p2', 'p3')],
            [('p1', 'p3'), ('p4', 'p2')],
            [('p1', 'p2'), ('p3', 'p4')],
        ]

    @pytest.mark.parametrize('n', [2, 3, 4, 5, 6, 7, 10])
    def test_every_pair_meets_once(self, n):
        players = [f'p{i}' for i in range(n)]
        rounds = round_robin_pairings(players)
        pairs = [frozenset(pair) for pairs in rounds for pair in pairs]
        assert len(pairs) == len(set(pairs))
        assert set(pairs) == {frozenset(pair) for pair in combinations(players, 2)}

    @pytest.mark.parametrize('n', [4, 5, 8, 9])
    def test_nobody_plays_twice_in_a_round(self, n):
        for pairs in round_robin_pairings([f'p{i}' for i in range(n)]):
            seen = [p for pair in pairs for p in pair]
            assert len(seen) == len(set(seen))

    def test_odd_field_sits_one_out_per_round(self, five_players):
        rounds = round_robin_pairings(five_players)
        assert len(rounds) == 5
        assert all(len(pairs) == 2 for pairs in rounds)


class TestGenerateRoundRobin:
    """Tests for round robin brackets."""

    def test_four_players(self, four_players):
        bracket = generate_round_robin(four_players, 't')
        assert bracket.format == ROUND_ROBIN
        assert len(bracket) == 6
        assert list(bracket.rounds(ROUND_ROBIN_KIND)) == [1, 2, 3]
        assert [m.id for m in bracket.matches] == [f't_rr_{i}' for i in range(1, 7)]
        assert all(m.status == READY for m in bracket.matches)
        assert all(m.advances_winner_to is None for m in bracket.matches)
        assert bracket.matches[0].round_name == "Round 1"

    def test_five_players(self, five_players):
        bracket = generate_round_robin(five_players, 't')
        assert len(bracket) == 10
        assert bracket.total_rounds == {ROUND_ROBIN_KIND: 5}
        assert bracket.terminal_match is None

    def test_completion(self, four_players, play_out):
        bracket = generate_round_robin(four_players, 't')
        assert not bracket.is_complete
        waves = play_out(bracket)
        assert waves == 1
        assert bracket.is_complete
        assert bracket.champion is None

    def test_last_report_completes_tournament(self):
        bracket = generate_round_robin(['a', 'b'], 't')
        result = report_result(bracket, 't_rr_1', 'b')
        assert result.tournament_complete
        assert [m.id for m in result.mutated_matches] == ['t_rr_1']

    def test_invalid_participants(self):
        with pytest.raises(InvalidInput):
            generate_round_robin(['a'], 't')

    def test_wrong_winner(self, four_players):
        bracket = generate_round_robin(four_players, 't')
        with pytest.raises(InvalidWinner):
            report_result(bracket, 't_rr_1', 'p2')

    def test_dispatch_random_is_reproducible(self, eight_players):
        first = generate(eight_players, ROUND_ROBIN, 'random', 't', random.Random(5))
        second = generate(eight_players, ROUND_ROBIN, 'random', 't', random.Random(5))
        assert first.to_dict() == second.to_dict()
        assert len(first) == 28

    def test_dispatch_does_not_mutate_input(self, eight_players):
        original = list(eight_players)
        generate(eight_players, ROUND_ROBIN, 'random', 't', random.Random(1))
        assert eight_players == original


class TestRoundRobinStandings:
    """Tests for round robin tables."""

    def test_wins_and_points(self, four_players):
        bracket = generate_round_robin(four_players, 't')
        # Round 1: (p1,p4), (p2,p3); round 2: (p1,p3), (p4,p2); round 3: (p1,p2), (p3,p4)
        report_result(bracket, 't_rr_1', 'p1', [21, 10])
        report_result(bracket, 't_rr_2', 'p2', [21, 19])
        report_result(bracket, 't_rr_3', 'p1', [21, 5])
        report_result(bracket, 't_rr_4', 'p2', [3, 21])
        report_result(bracket, 't_rr_5', 'p1', [21, 20])
        report_result(bracket, 't_rr_6', 'p3', [21, 18])

        table = round_robin_standings(bracket)
        assert [e['participant'] for e in table] == ['p1', 'p2', 'p3', 'p4']
        first = table[0]
        assert (first['wins'], first['losses'], first['played']) == (3, 0, 3)
        assert first['points_for'] == 63
        assert first['points_against'] == 35
        assert first['points_difference'] == 28
        assert first['win_rate'] == 1.0
        assert [e['position'] for e in table] == [1, 2, 3, 4]

    def test_ties_share_position(self, four_players):
        bracket = generate_round_robin(four_players, 't')
        table = round_robin_standings(bracket)
        assert [e['position'] for e in table] == [1, 1, 1, 1]
        assert all(e['win_rate'] == 0.0 for e in table)

    def test_points_break_ties(self):
        bracket = generate_round_robin(['a', 'b', 'c'], 't')
        # Each player wins once; 'c' wins by the biggest margin
        for match in list(bracket.matches):
            pair = {match.slot_a, match.slot_b}
            if pair == {'a', 'b'}:
                winner, margin = 'a', 1
            elif pair == {'b', 'c'}:
                winner, margin = 'b', 2
            else:
                winner, margin = 'c', 10
            score = [margin, 0] if winner == match.slot_a else [0, margin]
            report_result(bracket, match.id, winner, score)

        table = round_robin_standings(bracket)
        assert [e['participant'] for e in table] == ['c', 'b', 'a']
        assert all(e['wins'] == 1 for e in table)

    def test_rejects_elimination_bracket(self, four_players):
        with pytest.raises(InvalidInput):
            round_robin_standings(generate(four_players))
