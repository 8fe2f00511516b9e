"""Structured logging with correlation IDs for the demo steps."""

import logging
import logging.config
import json
import traceback
import uuid
from datetime import datetime
from typing import Dict, Any, Optional, Union
from contextvars import ContextVar
from dataclasses import dataclass, asdict
from pathlib import Path

from .types import LogLevel, DemoStep

# Correlation ID shared by every log line of one demo run
correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "context", "correlation_id"}


@dataclass
class LogContext:
    """Structured logging context."""
    correlation_id: Optional[str] = None
    step: Optional[DemoStep] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    operation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, filtering out None values."""
        data = asdict(self)
        if self.step is not None:
            data['step'] = self.step.value
        return {k: v for k, v in data.items() if v is not None}


class StructuredFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        corr_id = getattr(record, 'correlation_id', None) or correlation_id.get()
        if corr_id:
            log_data['correlation_id'] = corr_id

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        context = getattr(record, 'context', None)
        if context is not None:
            context_data = context.to_dict() if isinstance(context, LogContext) else context
            log_data.update(context_data)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches a LogContext to every record."""

    def __init__(self, logger: logging.Logger, context: LogContext):
        super().__init__(logger, {})
        self.context = context

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(kwargs.get('extra') or {})
        extra['context'] = self.context

        if 'correlation_id' not in extra:
            corr_id = self.context.correlation_id or correlation_id.get()
            if corr_id:
                extra['correlation_id'] = corr_id

        kwargs['extra'] = extra
        return msg, kwargs


class DemoLogger:
    """Logger taking structured fields as keyword arguments."""

    def __init__(self, name: str, context: Optional[LogContext] = None):
        self.logger = logging.getLogger(name)
        self.context = context or LogContext()
        self.adapter = ContextualLoggerAdapter(self.logger, self.context)

    def debug(self, msg: str, **kwargs) -> None:
        self.adapter.debug(msg, extra=kwargs)

    def info(self, msg: str, **kwargs) -> None:
        self.adapter.info(msg, extra=kwargs)

    def warning(self, msg: str, **kwargs) -> None:
        self.adapter.warning(msg, extra=kwargs)

    def error(self, msg: str, **kwargs) -> None:
        self.adapter.error(msg, extra=kwargs)

    def exception(self, msg: str, **kwargs) -> None:
        """Log at ERROR level with the active exception's traceback."""
        self.adapter.exception(msg, extra=kwargs)

    def with_context(self, **kwargs) -> 'DemoLogger':
        """Create a new logger with updated context."""
        new_context = LogContext(**{**asdict(self.context), **kwargs})
        return DemoLogger(self.logger.name, new_context)

    def start_operation(self, operation: str, **kwargs) -> 'OperationLogger':
        """Start a tracked operation."""
        return OperationLogger(self, operation, **kwargs)


class OperationLogger:
    """Tracks one operation from start to completion or failure."""

    def __init__(self, parent_logger: DemoLogger, operation: str,
                 step: Optional[DemoStep] = None, **fields):
        self.operation = operation
        self.operation_id = str(uuid.uuid4())
        self.start_time = datetime.now()
        self.logger = parent_logger.with_context(
            operation=operation,
            operation_id=self.operation_id,
            step=step,
        )

        self.logger.info(f"Starting operation: {operation}", **fields)

    def complete(self, msg: Optional[str] = None, **kwargs) -> None:
        """Mark operation as complete."""
        duration = (datetime.now() - self.start_time).total_seconds()
        self.logger.info(msg or f"Operation completed: {self.operation}",
                         duration_seconds=duration,
                         operation_status="completed",
                         **kwargs)

    def fail(self, msg: Optional[str] = None, exception: Optional[BaseException] = None, **kwargs) -> None:
        """Mark operation as failed."""
        duration = (datetime.now() - self.start_time).total_seconds()
        fail_msg = msg or f"Operation failed: {self.operation}"

        if exception is not None:
            self.logger.error(fail_msg,
                              duration_seconds=duration,
                              operation_status="failed",
                              error=str(exception),
                              error_type=type(exception).__name__,
                              **kwargs)
        else:
            self.logger.error(fail_msg,
                              duration_seconds=duration,
                              operation_status="failed",
                              **kwargs)


def setup_logging(
    level: Union[str, LogLevel] = LogLevel.INFO,
    log_file: Optional[str] = None,
    structured: bool = True,
    console: bool = True
) -> None:
    """Configure the root logger."""
    if isinstance(level, str):
        level = LogLevel(level.upper())

    handlers = {}

    if console:
        handlers['console'] = {
            'class': 'logging.StreamHandler',
            'stream': 'ext://sys.stdout',
            'formatter': 'structured' if structured else 'simple',
            'level': level.value
        }

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': str(log_path),
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5,
            'formatter': 'structured' if structured else 'simple',
            'level': level.value
        }

    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            },
            'structured': {
                '()': StructuredFormatter
            }
        },
        'handlers': handlers,
        'root': {
            'level': level.value,
            'handlers': list(handlers.keys())
        }
    }

    logging.config.dictConfig(config)


def get_logger(name: str, context: Optional[LogContext] = None) -> DemoLogger:
    """Get a demo logger with optional context."""
    return DemoLogger(name, context)


def set_correlation_id(corr_id: str):
    """Set correlation ID for current context; returns the reset token."""
    return correlation_id.set(corr_id)


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


def generate_correlation_id() -> str:
    return str(uuid.uuid4())
