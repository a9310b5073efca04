"""Entry point for running ImpossibleXO via ``python -m impossiblexo``."""

from __future__ import annotations

import logging

import uvicorn

from .config import AppConfig


def main() -> None:
    """Start the FastAPI-powered ImpossibleXO web server."""

    config = AppConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        "impossiblexo.ui:app",
        host=config.host,
        port=config.port,
        reload=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
