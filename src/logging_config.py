"""Configure application logging using the Python standard library.

Log records are rendered as one JSON object per line, on the console
and in a rotating file.  Besides timestamp, level, module and message,
the formatter copies the ``request_id`` and ``user_id`` attributes and
merges an ``extra`` dict when the caller passes them, e.g.::

    logger.info("Checkout completed",
                extra={"request_id": checkout_id, "user_id": customer.name,
                       "extra": {"total": 2220.0}})
"""

import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone

LOG_FILE_NAME = "checkout.log"


class JsonFormatter(logging.Formatter):
    """Format log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }
        for key in ("request_id", "user_id"):
            if hasattr(record, key):
                log_record[key] = getattr(record, key)
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            # flatten so consumers don't need to look inside a nested "extra"
            log_record.update(extra)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


def configure_logging(log_dir: str = "logs", level: int = logging.INFO) -> None:
    """Configure the root logger with JSON console and rotating file output.

    Calling this again replaces the handlers installed previously.

    Args:
        log_dir: Directory for ``checkout.log``; created if missing.
        level: Logging level for the root logger and both handlers.
    """
    os.makedirs(log_dir, exist_ok=True)
    logger = logging.getLogger()
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    formatter = JsonFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=5 * 1024 * 1024,  # 5 MB per log file
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)
    logger.addHandler(file_handler)
