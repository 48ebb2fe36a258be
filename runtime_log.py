"""
runtime_log.py – one-shot logging setup.

Everything goes to stderr and, when a path is given, to the runtime log
that the web remote serves under /log.
"""
from __future__ import annotations

import logging
from typing import Optional

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=FORMAT,
        handlers=handlers,
        force=True,
    )
