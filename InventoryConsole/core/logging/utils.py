"""
Logging utilities and helpers for the InventoryConsole sync core.

Provides additional functionality for common logging patterns:
- Timing context manager and decorator (sync and coroutine functions)
- Gateway request logging
"""

import inspect
import functools
import logging
import time
from typing import Any, Callable, Dict, Optional, TypeVar

from InventoryConsole.core.logging import get_logger

F = TypeVar('F', bound=Callable[..., Any])


class LogTimer:
    """
    Times a block and logs how long it took.

    A block that raises is logged at DEBUG; the exception itself is left
    for the caller to report.

    Example:
        with LogTimer("merge conversations"):
            merged = reconcile(local, snapshot, key=...)
    """

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.level = level
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> 'LogTimer':
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return
        self.duration = time.perf_counter() - self.start_time
        if exc_type is not None:
            self.logger.debug(
                "Operation '%s' failed after %.4f seconds: %s",
                self.operation, self.duration, exc_val
            )
        else:
            self.logger.log(
                self.level,
                "Operation '%s' completed in %.4f seconds",
                self.operation, self.duration
            )


def timed(
    operation: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG
) -> Callable[[F], F]:
    """
    Decorator to time function execution and log the duration.

    Coroutine functions are timed across their awaits.

    Args:
        operation: Name of the operation (defaults to function name)
        logger: Logger to use
        level: Log level for the timing message

    Example:
        @timed("list conversations")
        async def list_conversations(self):
            ...
    """
    def decorator(func: F) -> F:
        name = operation or func.__name__
        log = logger or get_logger(func.__module__)

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                with LogTimer(name, log, level):
                    return await func(*args, **kwargs)
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with LogTimer(name, log, level):
                return func(*args, **kwargs)
        return wrapper  # type: ignore[return-value]
    return decorator


class RequestLogger:
    """
    Logs gateway requests and their outcome.

    Successful responses are logged at DEBUG so steady polling stays quiet;
    4xx/5xx responses and transport failures are logged at WARNING.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger(__name__)

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        user: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log a completed HTTP request.

        Args:
            method: HTTP method
            path: Request path
            status_code: Response status code
            duration: Request duration in seconds
            user: Optional viewer identifier
            extra: Additional data to attach to the record
        """
        level = logging.DEBUG if status_code < 400 else logging.WARNING
        message = "%s %s - %d (%.4fs)"
        args = [method, path, status_code, duration]
        if user:
            message += " - User: %s"
            args.append(user)
        self.logger.log(level, message, *args, extra=extra or {})

    def log_failure(self, method: str, path: str, error: BaseException, duration: float) -> None:
        """Log a request that never produced a response."""
        self.logger.warning(
            "%s %s - %s after %.4fs: %s",
            method, path, type(error).__name__, duration, error
        )


__all__ = [
    'LogTimer',
    'timed',
    'RequestLogger',
]
