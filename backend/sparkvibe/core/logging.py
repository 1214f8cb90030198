from __future__ import annotations

import json
import logging
import sys
import time
from typing import Literal


def _json_formatter(record: logging.LogRecord) -> str:
    payload = {
        "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
        "level": record.levelname,
        "logger": record.name,
        "msg": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    return json.dumps(payload, ensure_ascii=False)


class JsonStreamHandler(logging.StreamHandler):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def setup_logging(level: int = logging.INFO, fmt: Literal["console", "json"] = "console") -> None:
    """
    Configure root + uvicorn loggers. Idempotent.
    """
    root = logging.getLogger()
    if getattr(root, "_sparkvibe_logging_inited", False):
        return

    for h in list(root.handlers):
        root.removeHandler(h)

    handler: logging.Handler
    if fmt == "json":
        handler = JsonStreamHandler(stream=sys.stdout)
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "[%(levelname)s] %(asctime)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))

    root.setLevel(level)
    root.addHandler(handler)

    # wipe uvicorn default handlers so we don't double log
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for h in list(logger.handlers):
            logger.removeHandler(h)
        logger.propagate = True

    root._sparkvibe_logging_inited = True  # type: ignore[attr-defined]
