"""
Run the development server.

Usage:
    python -m taskboard [--host 127.0.0.1] [--port 8000]
"""
from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from .logging_setup import setup_logging
from .settings import get_settings


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="taskboard", description="Run the Taskboard API server.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)

    setup_logging(get_settings().log_level)
    uvicorn.run(
        "taskboard.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
