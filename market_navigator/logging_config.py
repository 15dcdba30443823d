"""
Market Navigator - Centralized Logging Configuration
Supports both plain text (terminal) and JSON structured logging
"""

import logging
import sys
import json
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from contextvars import ContextVar


# Context variables for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
session_kind_var: ContextVar[str] = ContextVar('session_kind', default='')


def get_request_id() -> str:
    """Get current request ID from context"""
    return request_id_var.get() or ''


def set_request_id(request_id: str) -> None:
    """Set request ID in context"""
    request_id_var.set(request_id)


def get_session_kind() -> str:
    """Get the credential namespace (user/admin) of the current call"""
    return session_kind_var.get() or ''


def set_session_kind(kind: str) -> None:
    """Set the credential namespace in context"""
    session_kind_var.set(kind)


def generate_request_id() -> str:
    """Generate a unique request ID"""
    return str(uuid.uuid4())[:8]


_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'taskName', 'request_id', 'session_kind'
}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging
    One object per line, easy to ship to a log aggregator
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        session_kind = get_session_kind()
        if session_kind:
            log_data["session"] = session_kind

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info) if record.exc_info[0] else None
            }

        # Extra fields passed through `extra=`
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ContextualFormatter(logging.Formatter):
    """
    Readable formatter that includes the request id and session namespace
    """

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or '-'
        record.session_kind = get_session_kind() or '-'

        return super().format(record)


class NavigatorLogger(logging.Logger):
    """
    Custom logger with convenience methods for structured logging
    """

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        """Log outgoing HTTP request details"""
        level = logging.WARNING if status_code == 0 or status_code >= 500 else logging.DEBUG
        self.log(
            level,
            f"HTTP {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": duration_ms,
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, subject: str = None,
                       reason: str = None, **kwargs) -> None:
        """Log authentication events (never pass tokens or passwords here)"""
        level = logging.INFO if success else logging.WARNING
        self.log(
            level,
            f"Auth {event}: {'success' if success else 'failed'}" +
            (f" - {subject}" if subject else "") +
            (f" - {reason}" if reason else ""),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "auth_subject": subject,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: str = None,
                               **kwargs) -> None:
        """Log error with full context"""
        self.error(
            f"Error in {context}: {type(error).__name__}: {str(error)}",
            exc_info=True,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_message": str(error),
                "error_context": context,
                **kwargs
            }
        )


def setup_logging(level: str = "WARNING", log_format: str = "text",
                  stream: Optional[Any] = None) -> NavigatorLogger:
    """Configure the market_navigator logger"""

    logging.setLoggerClass(NavigatorLogger)

    logger = logging.getLogger("market_navigator")
    logger.__class__ = NavigatorLogger  # Ensure it's our custom class
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ContextualFormatter(
            fmt="%(asctime)s | %(levelname)-8s | %(session_kind)s | %(request_id)s | %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
    logger.addHandler(handler)

    # Don't double-log through the root logger
    logger.propagate = False

    return logger


# Default logger instance
logger = setup_logging()
