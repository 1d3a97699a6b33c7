# backend/app/core/logging.py
"""
Configuration du logging, appelée une fois au démarrage (scripts, workers).

LOG_JSON=True  → une ligne JSON par événement (python-json-logger)
LOG_JSON=False → format console lisible

Les modules loggent via logging.getLogger(__name__) et n'ont pas à
connaître le format de sortie.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from app.core.config import settings

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"

# Bibliothèques trop bavardes en DEBUG
QUIET_LOGGERS = ("sqlalchemy.engine", "asyncio")


class QuizJsonFormatter(JsonFormatter):
    """Champs standards ajoutés à chaque enregistrement JSON."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno
        log_record["application"] = settings.PROJECT_NAME
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Remplace les handlers du root logger. Idempotent."""
    level_name = (level or settings.LOG_LEVEL).upper()
    use_json = settings.LOG_JSON if json_output is None else json_output

    handler = logging.StreamHandler(sys.stderr)
    if use_json:
        handler.setFormatter(QuizJsonFormatter("%(timestamp)s %(level)s %(logger)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
