"""Board, markers and outcome detection for ImpossibleXO."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple


BOARD_SIZE = 9

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


class Marker(str, Enum):
    X = "X"
    O = "O"

    def opponent(self) -> "Marker":
        return Marker.O if self is Marker.X else Marker.X


class Side(str, Enum):
    HUMAN = "human"
    AUTOMATED = "automated"

    def other(self) -> "Side":
        return Side.AUTOMATED if self is Side.HUMAN else Side.HUMAN


@dataclass(frozen=True)
class PlayerAssignment:
    """Which marker each side plays with."""

    human: Marker = Marker.X
    automated: Marker = Marker.O

    def __post_init__(self) -> None:
        if self.human == self.automated:
            raise ValueError("Human and automated sides need different markers")

    @classmethod
    def for_human(cls, marker: Marker) -> "PlayerAssignment":
        marker = Marker(marker)
        return cls(human=marker, automated=marker.opponent())

    def marker_for(self, side: Side) -> Marker:
        return self.human if side is Side.HUMAN else self.automated

    def side_for(self, marker: Marker) -> Side:
        return Side.HUMAN if marker == self.human else Side.AUTOMATED

    def swapped(self) -> "PlayerAssignment":
        return PlayerAssignment(human=self.automated, automated=self.human)


# ---------- Errors ----------


class GameError(ValueError):
    """A move or request the game rejected without changing state."""


class InvalidIndexError(GameError):
    def __init__(self, index: object) -> None:
        super().__init__(f"Cell index {index!r} is outside 0-8")
        self.index = index


class CellOccupiedError(GameError):
    def __init__(self, index: int) -> None:
        super().__init__(f"Cell {index} is already occupied")
        self.index = index


class NotYourTurnError(GameError):
    pass


class RoundOverError(GameError):
    pass


class NoLegalMoveError(RuntimeError):
    """Raised when a move is requested on a full board."""


# ---------- Board ----------


def _check_index(index: int) -> None:
    # bool is an int subclass; True/False are never cell indices
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidIndexError(index)
    if not 0 <= index < BOARD_SIZE:
        raise InvalidIndexError(index)


@dataclass
class Board:
    # None for empty, otherwise a Marker
    _cells: List[Optional[Marker]] = field(
        default_factory=lambda: [None] * BOARD_SIZE
    )

    @classmethod
    def from_string(cls, layout: str) -> "Board":
        """Build a board from nine characters: 'X', 'O', or '.'/' ' for empty."""
        chars = [c for c in layout if c not in "\n|"]
        if len(chars) != BOARD_SIZE:
            raise ValueError("Board layout must describe exactly 9 cells")
        cells: List[Optional[Marker]] = []
        for c in chars:
            if c in (".", " ", "-"):
                cells.append(None)
            else:
                cells.append(Marker(c.upper()))
        return cls(cells)

    @property
    def cells(self) -> Tuple[Optional[Marker], ...]:
        return tuple(self._cells)

    def __getitem__(self, index: int) -> Optional[Marker]:
        _check_index(index)
        return self._cells[index]

    def is_empty(self, index: int) -> bool:
        _check_index(index)
        return self._cells[index] is None

    def is_full(self) -> bool:
        return all(c is not None for c in self._cells)

    def empty_indices(self) -> Iterator[int]:
        return (i for i, c in enumerate(self._cells) if c is None)

    def place(self, index: int, marker: Marker) -> None:
        _check_index(index)
        if self._cells[index] is not None:
            raise CellOccupiedError(index)
        self._cells[index] = Marker(marker)

    def undo(self, index: int) -> None:
        """Clear a trial placement made by the search."""
        _check_index(index)
        self._cells[index] = None

    def reset(self) -> None:
        self._cells = [None] * BOARD_SIZE

    def clone(self) -> "Board":
        return Board(self._cells.copy())

    def __str__(self) -> str:
        rows = []
        for r in range(3):
            rows.append(
                "".join(
                    c.value if c is not None else "." for c in self._cells[r * 3 : r * 3 + 3]
                )
            )
        return "\n".join(rows)


# ---------- Outcome ----------


class OutcomeKind(str, Enum):
    ONGOING = "ongoing"
    WIN = "win"
    DRAW = "draw"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    line: Optional[Tuple[int, int, int]] = None
    marker: Optional[Marker] = None
    winner: Optional[Side] = None

    @property
    def is_terminal(self) -> bool:
        return self.kind is not OutcomeKind.ONGOING


ONGOING = Outcome(OutcomeKind.ONGOING)
DRAW = Outcome(OutcomeKind.DRAW)


def winning_line(
    board: Board, marker: Optional[Marker] = None
) -> Optional[Tuple[Tuple[int, int, int], Marker]]:
    """First line in fixed order held entirely by ``marker`` (any marker if None)."""
    cells = board._cells
    for line in WINNING_LINES:
        a, b, c = line
        v = cells[a]
        if v is None or v != cells[b] or v != cells[c]:
            continue
        if marker is None or v == marker:
            return line, v
    return None


def evaluate(board: Board, assignment: PlayerAssignment) -> Outcome:
    """Classify the board as a win, a draw or still ongoing.

    Called after every placement, so it only checks the eight fixed lines.
    The winning side is resolved through ``assignment`` at call time.
    """
    found = winning_line(board)
    if found is not None:
        line, marker = found
        return Outcome(
            OutcomeKind.WIN,
            line=line,
            marker=marker,
            winner=assignment.side_for(marker),
        )
    if board.is_full():
        return DRAW
    return ONGOING
