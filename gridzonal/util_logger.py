"""
Structured Logger.

Every gridzonal logger writes one JSON object per record to stderr. A
logger is bound to a component (its architectural layer and name) and,
optionally, to a run context; both travel with each record as
`customDimensions`.

Exports:
    ComponentType: Architectural layer of the logging component
    LogLevel: Log level names
    LogContext: Run-level fields attached to every record
    JSONFormatter: One JSON object per record
    LoggerFactory: Builds component loggers
    log_exceptions: Decorator that logs and re-raises
    log_memory_checkpoint: psutil resource snapshot (DEBUG_MODE only)
    clear_checkpoint_context: Forget checkpoint timing for a run

Dependencies:
    psutil for memory tracking in debug mode
    gridzonal.config (lazy import for the debug mode check)
"""

import json
import logging
import os
import sys
import time
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from functools import wraps
from typing import Any, Dict, Optional

import psutil


# ============================================================================
# COMPONENTS AND LEVELS
# ============================================================================

class ComponentType(Enum):
    """Package layer a logger belongs to (becomes part of the logger name)."""
    SERVICE = "service"        # Engine and pipelines
    REPOSITORY = "repository"  # Region and grid sources
    ADAPTER = "adapter"        # Table export
    TRIGGER = "trigger"        # CLI


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        return getattr(logging, self.value)

    @classmethod
    def from_environment(cls) -> 'LogLevel':
        """LOG_LEVEL, or DEBUG when DEBUG_LOGGING=true; unknown names fall back to INFO."""
        if os.getenv("DEBUG_LOGGING", "").lower() == "true":
            return cls.DEBUG
        return cls.__members__.get(os.getenv("LOG_LEVEL", "INFO").upper(), cls.INFO)


@dataclass
class LogContext:
    """Fields shared by every record of one extraction run."""
    extraction_id: Optional[str] = None
    variable: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


# ============================================================================
# JSON FORMATTER
# ============================================================================

class JSONFormatter(logging.Formatter):
    """Render a record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }
        dimensions = getattr(record, 'custom_dimensions', None)
        if dimensions:
            payload['customDimensions'] = dimensions
        if record.exc_info and record.exc_info[0] is not None:
            payload['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }
        return json.dumps(payload, default=str)


# ============================================================================
# LOGGER FACTORY
# ============================================================================

class LoggerFactory:
    """
    Build component loggers named gridzonal.<layer>.<name>.

    Example:
        logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "grid_source")
        logger.info("Opened rain.nc", extra={'custom_dimensions': {'layers': 12}})
    """

    default_level: LogLevel = LogLevel.from_environment()

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
        level: Optional[LogLevel] = None
    ) -> logging.Logger:
        """
        Create (or re-bind) the logger for one component.

        Repeated calls return the same logging.Logger with a single JSON
        handler; the most recent context wins.
        """
        logger = logging.getLogger(f"gridzonal.{component_type.value}.{name}")
        numeric_level = (level or cls.default_level).numeric
        logger.setLevel(numeric_level)

        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)
        for handler in logger.handlers:
            handler.setLevel(numeric_level)
        logger.propagate = True

        bound = context.to_dict() if context else {}
        bound.update(component_type=component_type.value, component_name=name)

        # Keep the unwrapped _log so re-binding does not stack wrappers
        if not hasattr(logger, '_unbound_log'):
            logger._unbound_log = logger._log
        unbound_log = logger._unbound_log

        def _log_with_dimensions(level, msg, args, exc_info=None, extra=None,
                                 stack_info=False, stacklevel=1):
            extra = dict(extra) if extra else {}
            extra['custom_dimensions'] = {**bound, **extra.get('custom_dimensions', {})}
            unbound_log(level, msg, args, exc_info=exc_info, extra=extra,
                        stack_info=stack_info, stacklevel=stacklevel + 1)

        logger._log = _log_with_dimensions
        return logger

    @classmethod
    def create_with_context(
        cls,
        component_type: ComponentType,
        name: str,
        extraction_id: Optional[str] = None,
        variable: Optional[str] = None,
        source: Optional[str] = None
    ) -> logging.Logger:
        """Logger whose records carry the given run fields."""
        context = LogContext(extraction_id, variable, source)
        return cls.create_logger(component_type, name, context=context if context.to_dict() else None)


def log_exceptions(logger: Optional[logging.Logger] = None,
                   component_type: ComponentType = ComponentType.SERVICE):
    """
    Log any exception escaping the decorated function, then re-raise it.

    Without `logger`, a logger named after the function's module is used.

    Example:
        @log_exceptions(logger=logger)
        def extract_gridded(...):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log = logger or LoggerFactory.create_logger(
                    component_type, (func.__module__ or "unknown").rsplit(".", 1)[-1]
                )
                log.error(
                    f"❌ {func.__name__} failed: {type(e).__name__}: {e}",
                    exc_info=True,
                    extra={'custom_dimensions': {
                        'function': f"{func.__module__}.{func.__name__}",
                        'exception_type': type(e).__name__,
                        'region_id': getattr(e, 'region_id', None),
                        'traceback': traceback.format_exc(),
                    }}
                )
                raise
        return wrapper
    return decorator


# ============================================================================
# DEBUG MODE - Memory checkpoints
# ============================================================================

# context_id -> time of the previous checkpoint in that run
_last_checkpoint: Dict[str, float] = {}


def _debug_mode_enabled() -> bool:
    """DEBUG_MODE via the config singleton (lazy import avoids a cycle)."""
    try:
        from gridzonal.config import get_config
        return get_config().debug_mode
    except Exception as e:
        logging.getLogger("gridzonal.util_logger").warning(
            f"⚠️ DEBUG_MODE check failed, memory checkpoints disabled: {e}"
        )
        return False


def get_memory_stats() -> Optional[Dict[str, float]]:
    """
    Process and system memory snapshot, or None unless DEBUG_MODE=true.

    Keys: process_rss_mb, process_cpu_percent, system_available_mb, system_percent
    """
    if not _debug_mode_enabled():
        return None

    process = psutil.Process(os.getpid())
    system = psutil.virtual_memory()
    return {
        'process_rss_mb': round(process.memory_info().rss / 1024 ** 2, 1),
        'process_cpu_percent': round(process.cpu_percent(interval=None), 1),
        'system_available_mb': round(system.available / 1024 ** 2, 1),
        'system_percent': round(system.percent, 1),
    }


def log_memory_checkpoint(
    logger: logging.Logger,
    checkpoint_name: str,
    context_id: Optional[str] = None,
    **extra_fields
) -> None:
    """
    Log a memory snapshot plus the time since the previous checkpoint of
    the same run. No-op unless DEBUG_MODE=true.

    Example:
        log_memory_checkpoint(logger, "extract start", context_id=run_id, regions=120)
    """
    stats = get_memory_stats()
    if stats is None:
        return

    key = context_id or "_global"
    now = time.time()
    fields = {**stats, **extra_fields, 'checkpoint': checkpoint_name}
    if key in _last_checkpoint:
        fields['duration_since_last_ms'] = round((now - _last_checkpoint[key]) * 1000, 1)
    if context_id:
        fields['context_id'] = context_id
    _last_checkpoint[key] = now

    logger.info(f"📊 MEMORY CHECKPOINT: {checkpoint_name}", extra={'custom_dimensions': fields})


def clear_checkpoint_context(context_id: str) -> None:
    """Forget checkpoint timing for a finished run."""
    _last_checkpoint.pop(context_id, None)
