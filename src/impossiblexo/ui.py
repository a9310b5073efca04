"""FastAPI-powered web UI for playing ImpossibleXO in the browser."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import Difficulty, DifficultyPolicy, MinimaxAI
from .config import AppConfig
from .game import GameError, Marker, Outcome, PlayerAssignment, Side
from .session import GameOptions, GameSession, TurnController

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_config() -> AppConfig:
    """Server configuration, read from the environment on first use."""
    return AppConfig.from_env()


class EventLog:
    """Presentation listener that keeps what the browser has to redraw."""

    def __init__(self) -> None:
        self.events: List[Dict[str, object]] = []

    def on_place(self, index: int, marker: Marker) -> None:
        self.events.append({"type": "place", "index": index, "marker": marker.value})

    def on_round_over(self, outcome: Outcome) -> None:
        self.events.append({"type": "roundOver", "outcome": _serialize_outcome(outcome)})

    def on_clear(self) -> None:
        self.events.clear()
        self.events.append({"type": "clear"})


@dataclass
class WebSession:
    """Container for one browser game and its event log."""

    controller: TurnController
    log: EventLog
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, WebSession] = {}
app = FastAPI(
    title="ImpossibleXO", description="Tic-tac-toe against a minimax opponent"
)


def _parse_difficulty(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return Difficulty.parse(value).value


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    difficulty: Optional[str] = Field(
        default=None, description="easy, medium, hard or maximum"
    )
    human_marker: Marker = Field(default=Marker.X, alias="humanMarker")
    human_first: bool = Field(default=True, alias="humanFirst")

    @field_validator("difficulty")
    @classmethod
    def ensure_known_difficulty(cls, value: Optional[str]) -> Optional[str]:
        return _parse_difficulty(value)


class MoveRequest(BaseModel):
    """Request payload for placing the human's marker."""

    index: int = Field(ge=0, le=8)


class SettingsRequest(BaseModel):
    """Difficulty and marker changes; accepted at any point of a round."""

    model_config = ConfigDict(populate_by_name=True)

    difficulty: Optional[str] = None
    swap_markers: bool = Field(default=False, alias="swapMarkers")
    restart: bool = True

    @field_validator("difficulty")
    @classmethod
    def ensure_known_difficulty(cls, value: Optional[str]) -> Optional[str]:
        return _parse_difficulty(value)


def _create_session(
    difficulty: Difficulty, human_marker: Marker, human_first: bool
) -> Tuple[str, WebSession]:
    """Create a new game session and register it for later access."""

    options = GameOptions(
        assignment=PlayerAssignment.for_human(human_marker), difficulty=difficulty
    )
    policy = DifficultyPolicy(
        engine=MinimaxAI(), thresholds=dict(get_config().thresholds)
    )
    log = EventLog()
    controller = TurnController(
        GameSession(options=options),
        policy=policy,
        listener=log,
        first_mover=Side.HUMAN if human_first else Side.AUTOMATED,
    )
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = WebSession(controller=controller, log=log)
    logger.info(
        "created game %s (difficulty=%s, human=%s)",
        session_id,
        difficulty.value,
        human_marker.value,
    )
    return session_id, SESSIONS[session_id]


def _get_session(game_id: str) -> WebSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _serialize_outcome(outcome: Outcome) -> Dict[str, object]:
    return {
        "kind": outcome.kind.value,
        "line": list(outcome.line) if outcome.line else None,
        "winner": outcome.winner.value if outcome.winner else None,
        "marker": outcome.marker.value if outcome.marker else None,
    }


def _serialize_session(game_id: str, session: WebSession) -> Dict[str, object]:
    with session.lock:
        controller = session.controller
        state = controller.state
        assignment = controller.options.assignment
        return {
            "id": game_id,
            "cells": [c.value if c is not None else "" for c in controller.board.cells],
            "phase": state.phase.value,
            "humanMarker": assignment.human.value,
            "automatedMarker": assignment.automated.value,
            "difficulty": controller.options.difficulty.value,
            "firstMover": state.first_mover.value,
            "availableMoves": controller.available_moves(),
            "outcome": _serialize_outcome(state.outcome),
            "events": list(session.log.events),
        }


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    difficulty = Difficulty.parse(request.difficulty or get_config().difficulty)
    game_id, session = _create_session(
        difficulty, request.human_marker, request.human_first
    )
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(game_id: str, request: MoveRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        try:
            session.controller.human_move(request.index)
        except GameError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.controller.restart()
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/settings")
def update_settings(game_id: str, request: SettingsRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        controller = session.controller
        if request.difficulty is not None:
            controller.set_difficulty(Difficulty.parse(request.difficulty))
        if request.swap_markers:
            controller.swap_markers()
            if request.restart:
                controller.restart()
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>ImpossibleXO</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(480px, 100%);
        text-align: center;
      }
      h1 {
        margin: 0 0 1.25rem;
        letter-spacing: 0.06em;
      }
      .toolbar {
        display: flex;
        flex-wrap: wrap;
        gap: 0.75rem;
        justify-content: center;
        margin-bottom: 1.5rem;
      }
      button,
      select {
        font-size: 1rem;
        padding: 0.55rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
        font-family: inherit;
      }
      .pulse {
        animation: pulse 1.2s ease-in-out infinite;
      }
      @keyframes pulse {
        50% {
          box-shadow: 0 0 0 8px rgba(58, 102, 255, 0.2);
        }
      }
      .grid {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 8px;
        margin: 0 auto 1.25rem;
        width: min(320px, 100%);
      }
      .cell {
        aspect-ratio: 1;
        font-size: 2.6rem;
        font-weight: 700;
        border-radius: 12px;
        border: 1px solid rgba(60, 70, 120, 0.2);
        background: #f7f9ff;
      }
      .cell:disabled {
        cursor: default;
        color: inherit;
      }
      .cell.human-line {
        background: rgba(19, 114, 19, 0.5);
      }
      .cell.automated-line {
        background: rgba(185, 40, 40, 0.5);
      }
      .grid.draw .cell {
        background: rgba(247, 235, 7, 0.5);
      }
      #status {
        min-height: 1.5rem;
        font-weight: 500;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>ImpossibleXO</h1>
      <div class=\"toolbar\">
        <button id=\"swap\" type=\"button\">Play as O</button>
        <select id=\"difficulty\">
          <option value=\"easy\">Easy</option>
          <option value=\"medium\" selected>Medium</option>
          <option value=\"hard\">Hard</option>
          <option value=\"maximum\">Impossible</option>
        </select>
        <button id=\"restart\" type=\"button\">Restart</button>
      </div>
      <div id=\"grid\" class=\"grid\"></div>
      <p id=\"status\"></p>
    </main>
    <script>
      const gridEl = document.getElementById('grid');
      const statusEl = document.getElementById('status');
      const swapButton = document.getElementById('swap');
      const restartButton = document.getElementById('restart');
      const difficultyEl = document.getElementById('difficulty');

      let gameState = null;
      let isRequestPending = false;

      const cells = Array.from({ length: 9 }, (_, index) => {
        const cell = document.createElement('button');
        cell.className = 'cell';
        cell.type = 'button';
        cell.addEventListener('click', () => playMove(index));
        gridEl.appendChild(cell);
        return cell;
      });

      async function request(path, body) {
        const response = await fetch(path, {
          method: body === undefined ? 'GET' : 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: body === undefined ? undefined : JSON.stringify(body),
        });
        const payload = await response.json();
        if (!response.ok) {
          throw new Error(payload.detail || 'Request failed');
        }
        return payload;
      }

      function render() {
        if (!gameState) return;
        const outcome = gameState.outcome;
        const line = outcome.line || [];
        const available = new Set(gameState.availableMoves);
        gridEl.classList.toggle('draw', outcome.kind === 'draw');
        cells.forEach((cell, index) => {
          cell.textContent = gameState.cells[index];
          cell.disabled = !available.has(index) || gameState.phase !== 'awaiting_human';
          cell.classList.toggle(
            'human-line',
            line.includes(index) && outcome.winner === 'human'
          );
          cell.classList.toggle(
            'automated-line',
            line.includes(index) && outcome.winner === 'automated'
          );
        });
        swapButton.textContent = `Play as ${gameState.automatedMarker}`;
        difficultyEl.value = gameState.difficulty;
        restartButton.classList.toggle('pulse', gameState.phase === 'round_over');
        if (outcome.kind === 'win') {
          statusEl.textContent = outcome.winner === 'human' ? 'You win!' : 'The computer wins.';
        } else if (outcome.kind === 'draw') {
          statusEl.textContent = "It's a draw.";
        } else {
          statusEl.textContent = `Your move (${gameState.humanMarker}).`;
        }
      }

      async function run(action) {
        if (isRequestPending) return;
        isRequestPending = true;
        try {
          gameState = await action();
          render();
        } catch (error) {
          statusEl.textContent = error.message;
        } finally {
          isRequestPending = false;
        }
      }

      function startGame() {
        return run(() =>
          request('/api/game', { difficulty: difficultyEl.value, humanFirst: true })
        );
      }

      function playMove(index) {
        if (!gameState) return;
        return run(() => request(`/api/game/${gameState.id}/move`, { index }));
      }

      swapButton.addEventListener('click', () =>
        run(() => request(`/api/game/${gameState.id}/settings`, { swapMarkers: true }))
      );
      difficultyEl.addEventListener('change', () =>
        run(() =>
          request(`/api/game/${gameState.id}/settings`, { difficulty: difficultyEl.value })
        )
      );
      restartButton.addEventListener('click', () =>
        run(() => request(`/api/game/${gameState.id}/restart`, {}))
      );

      startGame();
    </script>
  </body>
</html>
"""
