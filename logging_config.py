"""
Logging configuration with request ID tracking.

Provides:
- Request ID propagation via context variables
- JSON logging for production, readable logging for development
- Flask middleware that tags and times each API request
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar

# Context variable for request ID (thread-safe and async-safe)
request_id_var: ContextVar[str] = ContextVar('request_id', default='system')

# LogRecord attributes copied into structured output when present
EXTRA_FIELDS = (
    'film_id', 'term', 'url', 'cache_hit', 'duration_ms',
    'status_code', 'endpoint', 'method',
)


def get_request_id() -> str:
    """Current request ID, or 'system' outside a request."""
    return request_id_var.get()


def set_request_id(request_id: str = None) -> str:
    """
    Set the request ID for the current context.

    Args:
        request_id: Request ID to set. If None, generates a new one.

    Returns:
        The request ID that was set
    """
    rid = request_id or uuid.uuid4().hex[:8]
    request_id_var.set(rid)
    return rid


class StructuredFormatter(logging.Formatter):
    """
    JSON log formatter, one object per line.

    {"timestamp": "...", "level": "INFO", "logger": "imdb_lookup",
     "request_id": "abc123", "message": "...", "film_id": "tt0133093"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "request_id": get_request_id(),
            "message": record.getMessage(),
        }

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """
    Readable log formatter for development.

    INFO     [abc123] Fetched tt0133093: The Matrix (1999)
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        request_id = get_request_id()
        prefix = f"[{request_id}] " if request_id != 'system' else ""

        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        message = record.getMessage()
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return f"{level} {prefix}{message}"


def configure_logging(
    level: str = "INFO",
    structured: bool = False,
    use_colors: bool = True,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        structured: Use JSON format for production
        use_colors: Use colored output (only for human format)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=use_colors))
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    for name in ("urllib3", "requests", "werkzeug"):
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_flask_request_id(app) -> None:
    """
    Add request ID middleware to a Flask app.

    - Uses the incoming X-Request-ID header or generates an ID
    - Logs each request with status and duration
    - Echoes X-Request-ID on the response

    Args:
        app: Flask application instance
    """
    from flask import g, request

    http_logger = logging.getLogger('http')

    @app.before_request
    def inject_request_id():
        g.request_id = set_request_id(request.headers.get('X-Request-ID'))
        g.request_start = time.monotonic()

    @app.after_request
    def log_request(response):
        duration_ms = (time.monotonic() - g.request_start) * 1000
        http_logger.info(
            f"{request.method} {request.path} -> {response.status_code} ({duration_ms:.0f}ms)",
            extra={
                'method': request.method,
                'endpoint': request.path,
                'status_code': response.status_code,
                'duration_ms': round(duration_ms, 2),
            }
        )
        response.headers['X-Request-ID'] = g.request_id
        return response
