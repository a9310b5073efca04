"""Turn/result state machine driving a human against the automated side."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol

from .ai import Difficulty, DifficultyPolicy
from .game import (
    ONGOING,
    Board,
    CellOccupiedError,
    Marker,
    Outcome,
    OutcomeKind,
    PlayerAssignment,
    NotYourTurnError,
    RoundOverError,
    Side,
    evaluate,
)

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    AWAITING_HUMAN = "awaiting_human"
    AWAITING_AUTOMATED = "awaiting_automated"
    ROUND_OVER = "round_over"


def phase_for(side: Side) -> Phase:
    return Phase.AWAITING_HUMAN if side is Side.HUMAN else Phase.AWAITING_AUTOMATED


# ---------- Collaborators ----------


class GameListener(Protocol):
    """Receives everything a front end needs to draw the game."""

    def on_place(self, index: int, marker: Marker) -> None: ...

    def on_round_over(self, outcome: Outcome) -> None: ...

    def on_clear(self) -> None: ...


class NullListener:
    def on_place(self, index: int, marker: Marker) -> None:
        pass

    def on_round_over(self, outcome: Outcome) -> None:
        pass

    def on_clear(self) -> None:
        pass


class SettingsProvider(Protocol):
    assignment: PlayerAssignment
    difficulty: Difficulty


@dataclass
class GameOptions:
    """Player-facing settings; they outlive individual rounds."""

    assignment: PlayerAssignment = field(default_factory=PlayerAssignment)
    difficulty: Difficulty = Difficulty.MEDIUM


# ---------- State ----------


@dataclass
class GameState:
    first_mover: Side = Side.HUMAN
    phase: Phase = Phase.AWAITING_HUMAN
    outcome: Outcome = ONGOING

    @property
    def active(self) -> bool:
        return self.phase is not Phase.ROUND_OVER


@dataclass
class GameSession:
    """Everything one game owns: the board, its state and the settings."""

    board: Board = field(default_factory=Board)
    state: GameState = field(default_factory=GameState)
    options: SettingsProvider = field(default_factory=GameOptions)


def next_first_mover(state: GameState) -> Side:
    """Loser of a finished round opens the next one; otherwise keep the opener."""
    outcome = state.outcome
    if (
        state.phase is Phase.ROUND_OVER
        and outcome.kind is OutcomeKind.WIN
        and outcome.winner is not None
    ):
        return outcome.winner.other()
    return state.first_mover


class TurnController:
    """Owns the alternation between the human and the automated side.

    The controller is the only thing that mutates a :class:`GameSession`.
    With ``autoplay`` enabled the automated reply runs inside the same call
    that handled the human move, so callers only ever observe
    ``AWAITING_HUMAN`` or ``ROUND_OVER`` between requests.
    """

    def __init__(
        self,
        session: Optional[GameSession] = None,
        policy: Optional[DifficultyPolicy] = None,
        listener: Optional[GameListener] = None,
        autoplay: bool = True,
        first_mover: Side = Side.HUMAN,
    ) -> None:
        self.session = session if session is not None else GameSession()
        self.policy = policy if policy is not None else DifficultyPolicy()
        self.listener: GameListener = listener if listener is not None else NullListener()
        self.autoplay = autoplay
        self.new_round(first_mover)

    # ---- accessors ----

    @property
    def board(self) -> Board:
        return self.session.board

    @property
    def state(self) -> GameState:
        return self.session.state

    @property
    def options(self) -> SettingsProvider:
        return self.session.options

    @property
    def phase(self) -> Phase:
        return self.session.state.phase

    @property
    def outcome(self) -> Outcome:
        return self.session.state.outcome

    # ---- rounds ----

    def new_round(self, first_mover: Side = Side.HUMAN) -> None:
        self.session.board.reset()
        self.session.state = GameState(
            first_mover=first_mover, phase=phase_for(first_mover)
        )
        self.listener.on_clear()
        logger.debug("new round, %s moves first", first_mover.value)
        if self.autoplay and self.phase is Phase.AWAITING_AUTOMATED:
            self.automated_move()

    def restart(self) -> Side:
        first = next_first_mover(self.session.state)
        self.new_round(first)
        return first

    # ---- moves ----

    def human_move(self, index: int) -> Outcome:
        phase = self.phase
        if phase is Phase.ROUND_OVER:
            raise RoundOverError("The round is over; restart to play again")
        if phase is not Phase.AWAITING_HUMAN:
            raise NotYourTurnError("It is the automated side's turn")

        marker = self.options.assignment.human
        outcome = self._apply(index, marker, Side.AUTOMATED)
        if self.autoplay and self.phase is Phase.AWAITING_AUTOMATED:
            outcome = self.automated_move()
        return outcome

    def automated_move(self) -> Outcome:
        phase = self.phase
        if phase is Phase.ROUND_OVER:
            raise RoundOverError("The round is over; restart to play again")
        if phase is not Phase.AWAITING_AUTOMATED:
            raise NotYourTurnError("It is the human's turn")

        options = self.options
        assignment = options.assignment
        index = self.policy.choose_move(
            self.session.board,
            options.difficulty,
            assignment.automated,
            assignment.human,
        )
        return self._apply(index, assignment.automated, Side.HUMAN)

    def _apply(self, index: int, marker: Marker, next_side: Side) -> Outcome:
        board = self.session.board
        try:
            board.place(index, marker)
        except CellOccupiedError:
            logger.debug("rejected move on occupied cell %d", index)
            raise
        logger.debug("%s placed on %d\n%s", marker.value, index, board)

        # Phase and outcome are final before listeners are notified.
        outcome = evaluate(board, self.options.assignment)
        state = self.session.state
        state.outcome = outcome
        state.phase = Phase.ROUND_OVER if outcome.is_terminal else phase_for(next_side)

        self.listener.on_place(index, marker)
        if outcome.is_terminal:
            if outcome.kind is OutcomeKind.WIN:
                logger.info(
                    "round over: %s wins on line %s", outcome.winner.value, outcome.line
                )
            else:
                logger.info("round over: draw")
            self.listener.on_round_over(outcome)
        return outcome

    # ---- settings ----

    def swap_markers(self) -> PlayerAssignment:
        """Swap markers between the sides; cells already placed keep their marker."""
        options = self.options
        options.assignment = options.assignment.swapped()
        logger.debug("markers swapped, human now plays %s", options.assignment.human.value)
        return options.assignment

    def set_difficulty(self, difficulty: Difficulty) -> Difficulty:
        self.options.difficulty = Difficulty.parse(difficulty)
        return self.options.difficulty

    def available_moves(self) -> List[int]:
        if not self.state.active:
            return []
        return list(self.session.board.empty_indices())
