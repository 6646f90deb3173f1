"""
Logging setup: JSON or text lines, email masking and per-request context
"""
import json
import logging
import re
import sys
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from contact_manager.core.config import Settings

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# logging_config.py is at: backend/contact_manager/core/logging_config.py
PROJECT_ROOT = Path(__file__).resolve().parents[3]

# Context variables for request context
request_context: ContextVar[Dict[str, Any]] = ContextVar('request_context', default={})

# Attributes every LogRecord carries; anything else came in via extra=
_RECORD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
    'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'taskName',
}


def mask_email(match: "re.Match") -> str:
    local, domain = match.group(1), match.group(2)
    return f"{local[0]}***@{domain}"


class SensitiveDataFilter(logging.Filter):
    """Filter to mask email addresses in log messages"""

    EMAIL_PATTERN = re.compile(r'([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})')

    def __init__(self, enabled: bool = True):
        super().__init__()
        self.enabled = enabled

    def _mask(self, value: str) -> str:
        return self.EMAIL_PATTERN.sub(mask_email, value)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.enabled:
            return True

        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._mask(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


class ContextualFormatter(logging.Formatter):
    """JSON formatter with request context support"""

    def __init__(self, *args, **kwargs):
        kwargs.pop('fmt', None)
        self.datefmt = kwargs.pop('datefmt', None)
        super().__init__(*args, **kwargs)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_dict = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'message': record.getMessage(),
        }

        ctx = request_context.get({})
        if ctx:
            log_dict.update(ctx)

        if record.exc_info:
            log_dict['exception'] = self.formatException(record.exc_info)

        # Fields passed with extra=
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS:
                continue
            try:
                json.dumps(value, default=str)
                log_dict[key] = value
            except (TypeError, ValueError):
                log_dict[key] = str(value)

        return json.dumps(log_dict, ensure_ascii=False, default=str)


def resolve_levels(settings: Settings, overrides: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Logger name -> level name, from settings then LOG_MODULE_LEVELS then overrides"""
    levels = {
        "root": settings.log_level,
        "contact_manager": settings.log_level,
        "sqlalchemy.engine": "INFO" if settings.log_sqlalchemy else "WARNING",
        "sqlalchemy.pool": "WARNING",
        "uvicorn.error": "INFO",
        "uvicorn.access": "INFO" if settings.log_uvicorn_access else "WARNING",
    }
    if settings.log_module_levels:
        try:
            levels.update(json.loads(settings.log_module_levels))
        except (json.JSONDecodeError, TypeError):
            logging.getLogger(__name__).warning(
                "Ignoring malformed LOG_MODULE_LEVELS: %r", settings.log_module_levels
            )
    levels.update(overrides or {})
    return levels


def build_handlers(settings: Settings) -> List[logging.Handler]:
    """Console handler plus the optional daily log file, all masking emails"""
    if settings.log_format.lower() == "json":
        formatter: logging.Formatter = ContextualFormatter(datefmt=DATE_FORMAT)
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)
    email_filter = SensitiveDataFilter(enabled=not settings.log_sensitive_data)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file_enabled:
        log_path = Path(settings.log_file_path)
        if not log_path.is_absolute():
            log_path = PROJECT_ROOT / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(TimedRotatingFileHandler(
            filename=str(log_path),
            when="midnight",
            backupCount=settings.log_file_retention,
            encoding="utf-8",
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(email_filter)
    return handlers


class LoggingConfig:
    """Process-wide logging setup and request context helpers"""

    _configured = False
    _module_levels: Dict[str, str] = {}

    @classmethod
    def configure(cls, settings: Settings, module_levels: Optional[Dict[str, str]] = None, force: bool = False):
        """Install handlers and levels; later calls are ignored unless force=True"""
        if cls._configured and not force:
            return

        levels = resolve_levels(settings, module_levels)
        root_level = levels.pop("root")
        logging.basicConfig(level=root_level.upper(), handlers=build_handlers(settings), force=True)
        for name, level in levels.items():
            logging.getLogger(name).setLevel(level.upper())

        cls._module_levels = levels
        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger for a module"""
        return logging.getLogger(name)

    @classmethod
    def get_module_level(cls, module: str) -> str:
        """Get logging level for a specific module"""
        return logging.getLevelName(logging.getLogger(module).level)

    @classmethod
    def set_context(cls, **kwargs):
        """Set context variables for logging"""
        ctx = request_context.get({}).copy()
        ctx.update(kwargs)
        request_context.set(ctx)

    @classmethod
    def get_context(cls) -> Dict[str, Any]:
        return request_context.get({}).copy()

    @classmethod
    def clear_context(cls):
        """Clear context variables"""
        request_context.set({})
