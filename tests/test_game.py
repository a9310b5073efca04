"""Unit tests for the ImpossibleXO board and outcome detection."""

import pytest

from impossiblexo.game import (
    WINNING_LINES,
    Board,
    CellOccupiedError,
    InvalidIndexError,
    Marker,
    OutcomeKind,
    PlayerAssignment,
    Side,
    evaluate,
    winning_line,
)


def _reachable_boards():
    """Every position reachable from the empty board with X opening."""
    seen = set()
    stack = [(Board(), Marker.X)]
    while stack:
        board, to_move = stack.pop()
        key = board.cells
        if key in seen:
            continue
        seen.add(key)
        yield board
        if winning_line(board) or board.is_full():
            continue
        for index in board.empty_indices():
            child = board.clone()
            child.place(index, to_move)
            stack.append((child, to_move.opponent()))


def test_new_board_is_empty():
    board = Board()
    assert list(board.empty_indices()) == list(range(9))
    assert not board.is_full()


def test_place_sets_cell_and_shrinks_empty_indices():
    board = Board()
    board.place(4, Marker.X)
    assert board[4] is Marker.X
    assert list(board.empty_indices()) == [0, 1, 2, 3, 5, 6, 7, 8]


def test_place_on_occupied_cell_is_rejected_repeatedly():
    board = Board()
    board.place(0, Marker.X)
    before = board.cells
    for _ in range(2):
        with pytest.raises(CellOccupiedError) as excinfo:
            board.place(0, Marker.O)
        assert excinfo.value.index == 0
        assert board.cells == before


@pytest.mark.parametrize("index", [-1, 9, 42, True, "3"])
def test_place_rejects_bad_index(index):
    board = Board()
    with pytest.raises(InvalidIndexError):
        board.place(index, Marker.X)
    assert list(board.empty_indices()) == list(range(9))


def test_undo_restores_empty_cell():
    board = Board.from_string("X........")
    board.place(5, Marker.O)
    board.undo(5)
    assert board == Board.from_string("X........")


def test_clone_is_independent():
    board = Board.from_string("XO.......")
    copy = board.clone()
    copy.place(8, Marker.X)
    assert board[8] is None
    assert copy[8] is Marker.X


def test_is_empty():
    board = Board.from_string("X...O....")
    assert not board.is_empty(0)
    assert board.is_empty(1)
    assert not board.is_empty(4)
    with pytest.raises(InvalidIndexError):
        board.is_empty(9)


def test_is_full():
    assert Board.from_string("XOXXOOOXX").is_full()
    assert not Board.from_string("XOXXOOOX.").is_full()


@pytest.mark.parametrize("line", WINNING_LINES)
def test_every_line_is_a_win(line):
    board = Board()
    for index in line:
        board.place(index, Marker.O)
    outcome = evaluate(board, PlayerAssignment())
    assert outcome.kind is OutcomeKind.WIN
    assert outcome.line == line
    assert outcome.marker is Marker.O
    assert outcome.winner is Side.AUTOMATED


def test_first_line_in_fixed_order_is_reported():
    # Row 0-1-2 and column 0-3-6 both complete
    board = Board.from_string("XXXXOOXO.")
    outcome = evaluate(board, PlayerAssignment())
    assert outcome.line == (0, 1, 2)
    assert outcome.winner is Side.HUMAN


def test_winner_follows_assignment():
    board = Board.from_string("OOO.XX.X.")
    outcome = evaluate(board, PlayerAssignment.for_human(Marker.O))
    assert outcome.winner is Side.HUMAN


def test_full_board_without_line_is_draw():
    board = Board.from_string("XOXXOOOXX")
    outcome = evaluate(board, PlayerAssignment())
    assert outcome.kind is OutcomeKind.DRAW
    assert outcome.line is None


def test_win_on_last_cell_is_not_a_draw():
    board = Board.from_string("XOXOXOOXX")
    assert evaluate(board, PlayerAssignment()).kind is OutcomeKind.WIN


def test_evaluate_does_not_mutate():
    board = Board.from_string("XX.OO....")
    before = board.cells
    evaluate(board, PlayerAssignment())
    assert board.cells == before


def test_evaluate_matches_line_definition_on_all_reachable_boards():
    assignment = PlayerAssignment()
    for board in _reachable_boards():
        cells = board.cells
        has_line = any(
            cells[a] is not None and cells[a] == cells[b] == cells[c]
            for a, b, c in WINNING_LINES
        )
        outcome = evaluate(board, assignment)
        if has_line:
            assert outcome.kind is OutcomeKind.WIN
        elif board.is_full():
            assert outcome.kind is OutcomeKind.DRAW
        else:
            assert outcome.kind is OutcomeKind.ONGOING


def test_assignment_swap_and_lookup():
    assignment = PlayerAssignment()
    swapped = assignment.swapped()
    assert swapped.human is Marker.O
    assert swapped.automated is Marker.X
    assert swapped.side_for(Marker.X) is Side.AUTOMATED
    assert swapped.marker_for(Side.HUMAN) is Marker.O


def test_assignment_requires_distinct_markers():
    with pytest.raises(ValueError):
        PlayerAssignment(human=Marker.X, automated=Marker.X)
