"""Environment-driven configuration for the ImpossibleXO server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from .ai import Difficulty, build_thresholds

ENV_PREFIX = "IMPOSSIBLEXO_"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class AppConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    difficulty: Difficulty = Difficulty.MEDIUM
    thresholds: Dict[Difficulty, float] = field(default_factory=build_thresholds)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ

        def get(name: str, default: str) -> str:
            return env.get(ENV_PREFIX + name, default).strip()

        try:
            port = int(get("PORT", "8000"))
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}PORT must be an integer") from exc
        if not 1 <= port <= 65535:
            raise ValueError(f"{ENV_PREFIX}PORT must lie in 1-65535, got {port}")

        log_level = get("LOG_LEVEL", "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(
                f"{ENV_PREFIX}LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}"
            )

        overrides = {}
        for level in (Difficulty.MEDIUM, Difficulty.HARD):
            raw = env.get(f"{ENV_PREFIX}{level.name}_THRESHOLD")
            if raw is not None:
                try:
                    overrides[level] = float(raw)
                except ValueError as exc:
                    raise ValueError(
                        f"{ENV_PREFIX}{level.name}_THRESHOLD must be a number"
                    ) from exc

        return cls(
            host=get("HOST", "0.0.0.0"),
            port=port,
            log_level=log_level,
            difficulty=Difficulty.parse(get("DIFFICULTY", Difficulty.MEDIUM.value)),
            thresholds=build_thresholds(overrides),
        )
