from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import Request, Response
from uvicorn.logging import ColourizedFormatter

from shopapi.core.config import settings

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_RESERVED_ATTRS = frozenset((
    "message", "args", "levelname", "levelno", "name", "pathname", "filename",
    "module", "lineno", "funcName", "exc_info", "exc_text", "stack_info",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "taskName", "msg",
))


class _RequestIdLogFilter(logging.Filter):
    """Injecte le request_id dans tous les logs d'une requête."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


class _JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname.upper(),
            "logger": record.name,
            "msg": record.getMessage(),
            "service": settings.APP_NAME,
            "request_id": getattr(record, "request_id", "-"),
        }

        # Merge extras (method, path, status, latency_ms, etc.)
        for k, v in record.__dict__.items():
            if k not in log_obj and k not in _RESERVED_ATTRS:
                log_obj[k] = v

        if record.exc_info:
            log_obj["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, ensure_ascii=False, default=str)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return _JsonLogFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z")
    return ColourizedFormatter("%(levelprefix)s %(name)s - %(message)s", use_colors=True)


def setup_logging() -> None:
    """Configure le logging pour l'application."""
    root_logger = logging.getLogger()
    if getattr(root_logger, "_shopapi_configured", False):
        return

    formatter = _build_formatter(settings.LOG_FORMAT.lower())
    request_filter = _RequestIdLogFilter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(request_filter)
    root_logger.addHandler(handler)

    if settings.LOG_TO_FILE:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / settings.LOG_FILE,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        # Toujours en JSON dans les fichiers
        file_handler.setFormatter(_JsonLogFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z"))
        file_handler.addFilter(request_filter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(settings.LOG_LEVEL.upper())
    root_logger._shopapi_configured = True  # type: ignore[attr-defined]

    # Moins de bruit
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aio_pika").setLevel(logging.WARNING)


async def access_log_middleware(request: Request, call_next) -> Response:
    """Middleware pour logguer les requêtes et réponses avec un request_id."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    token = _request_id.set(request_id)

    logger = logging.getLogger("shopapi.access")
    extra = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "-",
        "user_agent": request.headers.get("user-agent", "-"),
    }

    start = time.time()
    try:
        response = await call_next(request)
    finally:
        _request_id.reset(token)
    duration_ms = round((time.time() - start) * 1000, 2)

    extra["status"] = response.status_code
    extra["latency_ms"] = duration_ms

    logger.info("request", extra=extra)
    response.headers["X-Request-ID"] = request_id

    return response
