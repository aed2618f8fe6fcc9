"""
Structured Logging with structlog

Events are snake_case names with key/value fields. A run binds `run_root`
and `dry_run` once; every event inside the run carries them.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars


def setup_logging(
    level: str = "INFO",
    format: str = "console",  # "json" or "console"
    include_timestamp: bool = True,
) -> None:
    """
    Setup structured logging for the naming tool.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format ("json" for CI, "console" for humans)
        include_timestamp: Include timestamp in logs
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Logs go to stderr so that diffs printed on stdout stay clean
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )

    shared_processors = [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if include_timestamp:
        shared_processors.append(structlog.processors.TimeStamper(fmt="iso"))

    shared_processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]
    )

    if format == "json":
        output_processors = [
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        output_processors = [
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=shared_processors + output_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("declaration_renamed", old_fqn="App\\\\Entity", new_fqn="App\\\\AbstractEntity")
        ```
    """
    return structlog.get_logger(name)


@contextmanager
def run_context(root: str, dry_run: bool) -> Iterator[None]:
    """Bind the run root and mode to every event logged inside the block."""
    with bound_contextvars(run_root=root, dry_run=dry_run):
        yield


def log_failure(logger: structlog.stdlib.BoundLogger, event: str, error: BaseException, **fields: Any) -> None:
    """
    Log `event` at error level with the exception type, message and, for
    NamingError, its code.
    """
    fields["error_type"] = type(error).__name__
    fields["error_message"] = str(getattr(error, "message", error))
    code = getattr(error, "code", None)
    if code:
        fields["error_code"] = code
    logger.error(event, **fields)


@contextmanager
def timed_stage(logger: structlog.stdlib.BoundLogger, stage: str, **fields: Any) -> Iterator[None]:
    """
    Time one stage of a run.

    Emits `stage_complete` at debug level, or `stage_failed` at error level
    when the block raises. The exception is re-raised.

    Example:
        ```python
        with timed_stage(logger, "policy_pass", policy="query"):
            run_pass()
        ```
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        log_failure(logger, "stage_failed", e, stage=stage, duration_ms=_elapsed_ms(start), **fields)
        raise
    logger.debug("stage_complete", stage=stage, duration_ms=_elapsed_ms(start), **fields)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
