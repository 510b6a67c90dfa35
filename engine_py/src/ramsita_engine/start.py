#!/usr/bin/env python3
"""Launcher for the Ramsita game server (`ramsita-server`)"""

import argparse
import logging
import os
from typing import List, Optional

import uvicorn

logger = logging.getLogger(__name__)

APP_PATH = "ramsita_engine.main:app"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Command line options; each one defaults to its environment variable."""
    parser = argparse.ArgumentParser(prog="ramsita-server", description="Run the Ramsita game server")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", 8000)))
    parser.add_argument("--reload", action="store_true",
                        default=os.getenv("RELOAD", "false").lower() == "true")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "info").lower(),
                        choices=["critical", "error", "warning", "info", "debug"])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    # main.py reads LOG_LEVEL when the app module is imported
    os.environ["LOG_LEVEL"] = args.log_level
    logging.basicConfig(level=args.log_level.upper())

    logger.info(f"Serving {APP_PATH} on http://{args.host}:{args.port} (websocket at /ws)")
    uvicorn.run(APP_PATH, host=args.host, port=args.port, reload=args.reload, log_level=args.log_level)


if __name__ == "__main__":
    main()
