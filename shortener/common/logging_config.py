"""Logging configuration for URL shortener."""

import json
import logging
import sys
from typing import List, Optional

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""
    
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the ``shortener`` logger.
    
    Module loggers (``shortener.service``, ``shortener.storage.file``,
    ``shortener.web``...) inherit its handlers. Calling it again replaces
    the handlers instead of stacking them.
    
    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Optional file receiving the same records as stdout
        json_format: Emit one JSON object per line instead of plain text
        
    Returns:
        The configured ``shortener`` logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JsonFormatter() if json_format else logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT)
    
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    
    logger = logging.getLogger("shortener")
    logger.setLevel(numeric_level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    
    return logger
