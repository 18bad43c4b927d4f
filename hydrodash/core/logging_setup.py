from __future__ import annotations

import logging

from hydrodash.core.config import Settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def _level_from_str(level: str) -> int:
    s = str(level or "").strip().upper()
    if not s:
        return logging.INFO
    if s.isdigit():
        return int(s)
    return logging.getLevelNamesMapping().get(s, logging.INFO)


def setup_logging(settings: Settings) -> logging.Logger:
    """Configure the root logger for the service.

    Library loggers (httpx, uvicorn) flow through the same handler. Calling it
    again replaces the handler instead of stacking a second one, which keeps
    repeated ``create_app`` calls in tests quiet.
    """
    level_num = logging.DEBUG if settings.debug else _level_from_str(settings.log_level)

    root = logging.getLogger()
    root.setLevel(level_num)
    for h in list(root.handlers):
        if getattr(h, "_hydrodash", False):
            root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setLevel(level_num)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler._hydrodash = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    logging.captureWarnings(True)
    return logging.getLogger("hydrodash")
