"""JSON logging configuration for the NLU bridge."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context") and record.context:
            log_data["context"] = record.context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    """Configure JSON logging on the root logger.

    ``debug`` forces DEBUG regardless of ``level``.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)

    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"nlu_bridge.{name}")


class TurnLogger(logging.LoggerAdapter):
    """Logger adapter that stamps every record with the Dialogflow session of the turn.

    Per-call ``context`` is merged over the bound fields::

        log = TurnLogger(logger, {"session": "projects/p/agent/sessions/abc"})
        log.info('Query "reset password" answered in 412ms', context={"action": "repeat", "retries_left": 0})

    emits::

        {"level": "INFO", "logger": "nlu_bridge.fulfillment_service",
         "message": "Query \\"reset password\\" answered in 412ms",
         "context": {"session": "projects/p/agent/sessions/abc", "action": "repeat", "retries_left": 0}, ...}
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = kwargs.pop("context", None)
        if context or self.extra:
            combined_context = {**self.extra, **(context or {})}
            kwargs["extra"] = {"context": combined_context}
        return msg, kwargs
