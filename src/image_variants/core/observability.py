"""Structured logging with per-message context."""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .logging_config import get_logger


@dataclass
class LogContext:
    """Context information attached to log lines of one unit of work."""

    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        """Create new context with operation set."""
        return LogContext(
            correlation_id=self.correlation_id,
            operation=operation,
            component=self.component,
            metadata=self.metadata.copy(),
        )

    def with_metadata(self, **kwargs: Any) -> "LogContext":
        """Create new context with additional metadata."""
        new_metadata = self.metadata.copy()
        new_metadata.update(kwargs)
        return LogContext(
            correlation_id=self.correlation_id,
            operation=self.operation,
            component=self.component,
            metadata=new_metadata,
        )


class StructuredLogger:
    """Logger rendering a LogContext into each message."""

    def __init__(self, name: str = "image-variants", logger: Optional[logging.Logger] = None):
        self._logger = logger or get_logger(name)

    @staticmethod
    def format_message(message: str, context: Optional[LogContext] = None, **kwargs: Any) -> str:
        if context is None:
            if not kwargs:
                return message
            extras = ", ".join(f"{k}={v}" for k, v in kwargs.items())
            return f"{message} ({extras})"

        formatted = f"[{context.correlation_id}] {message}"
        if context.operation:
            formatted = f"[{context.operation}] {formatted}"

        fields = {**context.metadata, **kwargs}
        if fields:
            extras = ", ".join(f"{k}={v}" for k, v in fields.items())
            formatted = f"{formatted} ({extras})"
        return formatted

    def _log(self, level: int, message: str, context: Optional[LogContext], **kwargs: Any) -> None:
        exc_info = kwargs.pop("exc_info", None)
        self._logger.log(
            level, self.format_message(message, context, **kwargs), exc_info=exc_info
        )

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, context, **kwargs)
