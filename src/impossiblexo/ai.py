"""Exhaustive minimax search and difficulty-based move selection."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple, Union

from .game import Board, Marker, NoLegalMoveError, winning_line

logger = logging.getLogger(__name__)


WIN_SCORE = 10

# Memo key: (maximizer marker, cells, maximizing node)
_NodeKey = Tuple[Marker, Tuple[Optional[Marker], ...], bool]


def _back_up(score: int) -> int:
    # One ply further from the result: wins shrink, losses grow towards 0.
    if score > 0:
        return score - 1
    if score < 0:
        return score + 1
    return 0


@dataclass
class MinimaxAI:
    """Full-depth minimax without pruning.

    A line for the maximizer is worth ``+10`` and for the minimizer ``-10``
    at the node where it appears. Each ply between the root and that node
    moves the value one step towards zero, so a win found at ply ``d`` is
    worth ``10 - d``: quicker wins and slower losses rank higher.

    Node values are memoized per position. The table only stores values
    relative to the node itself, so reusing it never changes which move is
    picked.
    """

    use_memo: bool = True
    nodes_evaluated: int = 0
    _tt: Dict[_NodeKey, int] = field(default_factory=dict, repr=False)

    # ---- public API ----

    def best_move(
        self,
        board: Board,
        maximizer: Marker,
        minimizer: Optional[Marker] = None,
        maximizing_turn: bool = True,
    ) -> int:
        """Return the optimal cell for the side to move at the root.

        ``maximizing_turn`` says whether the root places the maximizer's
        marker. Ties go to the lowest index.
        """
        maximizer = Marker(maximizer)
        minimizer = maximizer.opponent() if minimizer is None else Marker(minimizer)
        if maximizer == minimizer:
            raise ValueError("Maximizer and minimizer need different markers")

        # Trial placements happen on a private copy only.
        work = board.clone()
        moves = list(work.empty_indices())
        if not moves:
            raise NoLegalMoveError("No empty cell left to search")

        self.nodes_evaluated = 0
        marker = maximizer if maximizing_turn else minimizer
        best_index = moves[0]
        best_score: Optional[int] = None
        for index in moves:
            work.place(index, marker)
            score = _back_up(
                self._minimax(work, maximizer, minimizer, not maximizing_turn)
            )
            work.undo(index)
            if best_score is None:
                better = True
            elif maximizing_turn:
                better = score > best_score
            else:
                better = score < best_score
            if better:
                best_score, best_index = score, index

        logger.debug(
            "minimax picked cell %d (score %s, %d nodes) for %s",
            best_index,
            best_score,
            self.nodes_evaluated,
            marker.value,
        )
        return best_index

    def score(self, board: Board, maximizer: Marker, maximizing_turn: bool = True) -> int:
        """Value of ``board`` for ``maximizer`` with the given side to move."""
        maximizer = Marker(maximizer)
        return self._minimax(
            board.clone(), maximizer, maximizer.opponent(), maximizing_turn
        )

    # ---- core search ----

    def _minimax(
        self,
        board: Board,
        maximizer: Marker,
        minimizer: Marker,
        maximizing: bool,
    ) -> int:
        self.nodes_evaluated += 1

        found = winning_line(board)
        if found is not None:
            return WIN_SCORE if found[1] == maximizer else -WIN_SCORE
        if board.is_full():
            return 0

        key: Optional[_NodeKey] = None
        if self.use_memo:
            key = (maximizer, board.cells, maximizing)
            hit = self._tt.get(key)
            if hit is not None:
                return hit

        if maximizing:
            value = -(WIN_SCORE + 1)
            for index in list(board.empty_indices()):
                board.place(index, maximizer)
                value = max(
                    value,
                    _back_up(self._minimax(board, maximizer, minimizer, False)),
                )
                board.undo(index)
        else:
            value = WIN_SCORE + 1
            for index in list(board.empty_indices()):
                board.place(index, minimizer)
                value = min(
                    value,
                    _back_up(self._minimax(board, maximizer, minimizer, True)),
                )
                board.undo(index)

        if key is not None:
            self._tt[key] = value
        return value


# ---------- Difficulty ----------


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MAXIMUM = "maximum"

    @classmethod
    def parse(cls, value: Union[str, "Difficulty"]) -> "Difficulty":
        if isinstance(value, Difficulty):
            return value
        normalized = str(value).strip().lower()
        if normalized == "impossible":
            return cls.MAXIMUM
        try:
            return cls(normalized)
        except ValueError as exc:
            choices = ", ".join(d.value for d in cls)
            raise ValueError(
                f"Unknown difficulty {value!r}. Choose one of {choices}."
            ) from exc


DEFAULT_THRESHOLDS: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.0,
    Difficulty.MEDIUM: 33.0,
    Difficulty.HARD: 66.0,
    Difficulty.MAXIMUM: 100.0,
}

# Allowed tuning range per level; EASY and MAXIMUM are fixed.
THRESHOLD_RANGES: Dict[Difficulty, Tuple[float, float]] = {
    Difficulty.EASY: (0.0, 0.0),
    Difficulty.MEDIUM: (33.0, 50.0),
    Difficulty.HARD: (66.0, 100.0),
    Difficulty.MAXIMUM: (100.0, 100.0),
}


def build_thresholds(
    overrides: Optional[Mapping[Union[str, "Difficulty"], float]] = None,
) -> Dict[Difficulty, float]:
    thresholds = dict(DEFAULT_THRESHOLDS)
    for name, value in (overrides or {}).items():
        level = Difficulty.parse(name)
        low, high = THRESHOLD_RANGES[level]
        value = float(value)
        if not low <= value <= high:
            raise ValueError(
                f"Threshold for {level.value} must lie in [{low:g}, {high:g}], got {value:g}"
            )
        thresholds[level] = value
    return thresholds


@dataclass
class DifficultyPolicy:
    """Chooses between a searched move and a random legal move.

    A draw in ``[0, 100)`` below the level's threshold runs the search,
    anything else picks uniformly among the empty cells. EASY (0) never
    searches and MAXIMUM (100) always does.
    """

    engine: MinimaxAI = field(default_factory=MinimaxAI)
    thresholds: Dict[Difficulty, float] = field(default_factory=build_thresholds)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def threshold(self, difficulty: Union[str, "Difficulty"]) -> float:
        return self.thresholds[Difficulty.parse(difficulty)]

    def choose_move(
        self,
        board: Board,
        difficulty: Union[str, "Difficulty"],
        maximizer: Marker,
        minimizer: Optional[Marker] = None,
    ) -> int:
        moves = list(board.empty_indices())
        if not moves:
            raise NoLegalMoveError("Automated move requested on a full board")

        threshold = self.threshold(difficulty)
        draw = self.rng.random() * 100
        if draw >= threshold:
            index = self.rng.choice(moves)
            logger.debug(
                "random move %d (draw %.1f >= %.1f)", index, draw, threshold
            )
            return index
        return self.engine.best_move(board, maximizer, minimizer, True)
