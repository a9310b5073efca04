"""ImpossibleXO package exposing game logic, the minimax opponent, and the web application."""

from .ai import Difficulty, DifficultyPolicy, MinimaxAI
from .game import Board, Marker, Outcome, PlayerAssignment, Side, evaluate
from .session import GameOptions, GameSession, Phase, TurnController
from .ui import app

__all__ = [
    "Board",
    "Difficulty",
    "DifficultyPolicy",
    "GameOptions",
    "GameSession",
    "Marker",
    "MinimaxAI",
    "Outcome",
    "Phase",
    "PlayerAssignment",
    "Side",
    "TurnController",
    "app",
    "evaluate",
]
