from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import IO, Optional

from kv_cache.application.request_context import request_id_var

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(request_id)s - %(message)s"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    log_level: str,
    log_format: str = "text",
    stream: Optional[IO[str]] = None,
) -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())

    if log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logging.basicConfig(level=level, handlers=[handler], force=True)

    # redis-py logs every reconnect attempt at DEBUG
    if level > logging.DEBUG:
        logging.getLogger("redis").setLevel(logging.WARNING)
