import numpy as np
import pytest

from chomp.game import Game, GameStatus, choose_move, fallback_move, play_out
from chomp.game_basics import POISON, BoardSize, InvalidMove, Position, deserialize_state, new_board


def test_new_game_is_in_progress():
    g = Game(BoardSize(2, 3))
    assert g.status is GameStatus.IN_PROGRESS
    assert g.to_move == 0
    assert len(g.state) == 6
    assert g.winner is None


def test_invalid_move_leaves_game_untouched():
    g = Game(BoardSize(2, 2))
    g.apply(Position(1, 1))
    before = g.state
    with pytest.raises(InvalidMove):
        g.apply(Position(1, 2))
    assert g.state == before
    assert g.to_move == 1
    assert g.history == [Position(1, 1)]


def test_taking_poison_ends_game_and_mover_loses():
    g = Game(BoardSize(1, 2))
    g.apply(Position(1, 1))
    assert g.opponent_has_forced_win() is False
    status = g.apply(POISON)
    assert status is GameStatus.MOVER_LOSES_ON_POISON
    assert g.loser == 1
    assert g.winner == 0
    with pytest.raises(RuntimeError):
        g.apply(POISON)


def test_assess_reports_lost_position_without_ending_game():
    g = Game(BoardSize(1, 2))
    assert g.assess() is GameStatus.IN_PROGRESS
    g.apply(Position(1, 1))
    assert g.assess() is GameStatus.OPPONENT_HAS_NO_WINNING_MOVE
    assert g.status is GameStatus.IN_PROGRESS
    assert g.is_over is False
    # the lost player may still move
    g.apply(POISON)
    assert g.assess() is GameStatus.MOVER_LOSES_ON_POISON


def test_assess_after_winning_reply_on_2x2():
    g = Game(BoardSize(2, 2))
    assert g.assess() is GameStatus.IN_PROGRESS
    g.apply(Position(1, 2))
    assert g.assess() is GameStatus.OPPONENT_HAS_NO_WINNING_MOVE
    assert not g.is_over


def test_optimal_self_play_2x2_second_player_takes_poison():
    res = play_out(BoardSize(2, 2))
    assert [m['move'] for m in res['moves']] == ["b2", "b1", "a2", "a1"]
    assert res['loser'] == 1
    assert res['winner'] == 0
    assert res['plies'] == 4


@pytest.mark.parametrize("rows,columns", [(1, 2), (2, 2), (2, 3), (3, 2), (3, 3), (1, 4)])
def test_first_player_wins_every_rectangle_with_best_play(rows, columns):
    res = play_out(BoardSize(rows, columns))
    assert res['winner'] == 0
    assert res['moves'][-1]['move'] == "a1"


def test_single_square_first_player_must_take_poison():
    res = play_out(BoardSize(1, 1))
    assert res['loser'] == 0
    assert res['plies'] == 1


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_optimal_beats_random(seed):
    res = play_out(BoardSize(3, 3), policies=('optimal', 'random'), seed=seed)
    assert res['winner'] == 0


def test_fallback_is_smallest_bite():
    s = deserialize_state("a1 a2 b1", BoardSize(2, 2))
    assert fallback_move(s) == Position(1, 1)
    assert fallback_move(deserialize_state("a1", BoardSize(1, 1))) == POISON


def test_choose_move_policies():
    rng = np.random.default_rng(7)
    s = new_board(3, 3)
    assert choose_move(s, 'optimal', rng=rng) == Position(1, 2)
    assert choose_move(s, 'epsilon', rng=rng, epsilon=0.0) == Position(1, 2)
    for _ in range(10):
        mv = choose_move(s, 'random', rng=rng)
        assert mv in s and mv != POISON
    only_poison = deserialize_state("a1", BoardSize(1, 1))
    assert choose_move(only_poison, 'random', rng=rng) == POISON
    with pytest.raises(ValueError):
        choose_move(s, 'greedy')


def test_play_out_is_reproducible_with_seed():
    a = play_out(BoardSize(3, 3), policies=('random', 'random'), seed=11)
    b = play_out(BoardSize(3, 3), policies=('random', 'random'), seed=11)
    assert a == b
