"""Tests for the ImpossibleXO minimax search and difficulty policy."""

import random
from collections import Counter

import pytest

from impossiblexo.ai import Difficulty, DifficultyPolicy, MinimaxAI, build_thresholds
from impossiblexo.game import Board, Marker, NoLegalMoveError, winning_line


def test_ai_takes_immediate_win():
    board = Board.from_string("OO.XX....")
    ai = MinimaxAI()
    assert ai.best_move(board, Marker.O, Marker.X) == 2


def test_ai_blocks_opponent_line():
    board = Board.from_string("XX..O....")
    ai = MinimaxAI()
    assert ai.best_move(board, Marker.O, Marker.X) == 2


def test_ai_prefers_faster_win():
    # Cell 2 wins at once; X threatens 2 and 4 otherwise.
    board = Board.from_string("OO.X.X..X")
    ai = MinimaxAI()
    assert ai.best_move(board, Marker.O, Marker.X) == 2
    assert ai.score(board, Marker.O) == 9


def test_slower_loss_scores_higher():
    # X threatens 1 and 3 at once; O cannot stop both and every reply loses.
    board = Board.from_string("X.X.O.X..")
    ai = MinimaxAI()
    assert ai.best_move(board, Marker.O, Marker.X) == 1
    later_loss = ai.score(board, Marker.O)
    # Same threat, but X is already to move.
    immediate_loss = ai.score(
        Board.from_string("XX..O...."), Marker.O, maximizing_turn=False
    )
    assert later_loss == -8
    assert immediate_loss == -9
    assert later_loss > immediate_loss


def test_ties_break_on_lowest_index():
    # Every reply to a centre opening draws with best play; corner 0 is first.
    board = Board.from_string("....X....")
    ai = MinimaxAI()
    assert ai.best_move(board, Marker.O, Marker.X) == 0


def test_search_does_not_mutate_caller_board():
    board = Board.from_string("X...O...X")
    before = board.cells
    MinimaxAI().best_move(board, Marker.O, Marker.X)
    assert board.cells == before


def test_memo_does_not_change_choice():
    board = Board.from_string("X.......O")
    with_memo = MinimaxAI(use_memo=True).best_move(board, Marker.X, Marker.O)
    without_memo = MinimaxAI(use_memo=False).best_move(board, Marker.X, Marker.O)
    assert with_memo == without_memo


def test_minimizing_root_plays_minimizer_marker():
    # Root is the minimizer (X) to move; X must take its own win on 2.
    board = Board.from_string("XX.OO....")
    ai = MinimaxAI()
    assert ai.best_move(board, Marker.O, Marker.X, maximizing_turn=False) == 2


def test_full_board_raises():
    with pytest.raises(NoLegalMoveError):
        MinimaxAI().best_move(Board.from_string("XOXXOOOXX"), Marker.O)


def test_best_move_is_always_an_empty_cell():
    ai = MinimaxAI()
    stack = [(Board(), Marker.X)]
    seen = set()
    while stack:
        board, to_move = stack.pop()
        if board.cells in seen:
            continue
        seen.add(board.cells)
        if winning_line(board) or board.is_full():
            continue
        move = ai.best_move(board, to_move, to_move.opponent())
        assert move in list(board.empty_indices())
        for index in board.empty_indices():
            child = board.clone()
            child.place(index, to_move)
            stack.append((child, to_move.opponent()))


def test_easy_picks_uniformly_among_empty_cells():
    board = Board.from_string("....X....")
    policy = DifficultyPolicy(rng=random.Random(1234))
    counts = Counter(
        policy.choose_move(board, Difficulty.EASY, Marker.O, Marker.X)
        for _ in range(4000)
    )
    assert set(counts) == {0, 1, 2, 3, 5, 6, 7, 8}
    for index in counts:
        assert 350 < counts[index] < 650


def test_maximum_always_searches():
    board = Board.from_string("XX..O....")
    policy = DifficultyPolicy(rng=random.Random(7))
    for _ in range(50):
        assert policy.choose_move(board, Difficulty.MAXIMUM, Marker.O, Marker.X) == 2


def test_policy_rejects_full_board():
    policy = DifficultyPolicy()
    with pytest.raises(NoLegalMoveError):
        policy.choose_move(
            Board.from_string("XOXXOOOXX"), Difficulty.MAXIMUM, Marker.O, Marker.X
        )


def test_default_thresholds():
    policy = DifficultyPolicy()
    assert policy.threshold("easy") == 0
    assert policy.threshold(Difficulty.MEDIUM) == 33
    assert policy.threshold("hard") == 66
    assert policy.threshold("impossible") == 100


def test_threshold_overrides_are_range_checked():
    assert build_thresholds({"medium": 50})[Difficulty.MEDIUM] == 50
    with pytest.raises(ValueError):
        build_thresholds({"medium": 60})
    with pytest.raises(ValueError):
        build_thresholds({Difficulty.EASY: 10})


def test_unknown_difficulty_is_rejected():
    with pytest.raises(ValueError):
        Difficulty.parse("nightmare")
