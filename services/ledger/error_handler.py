"""
Centralized Error Handler for background jobs

Logs failures with context before they propagate, so scheduled work never
fails silently.
"""

from functools import wraps
from typing import Any, Callable, TypeVar

from logging_config import log_error

T = TypeVar('T')


def handle_errors(
    default: Any = None,
    context: dict | None = None,
    log_level: str = "ERROR",
    reraise: bool = True
):
    """
    Decorator for logged error handling.

    Usage:
        @handle_errors(context={"operation": "replenish_sun"})
        def replenish():
            ...

    With reraise=False the error is logged and `default` returned instead.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                ctx = dict(context or {})
                ctx.update({"function": func.__name__})
                log_error(e, ctx, log_level)
                if reraise:
                    raise
                return default

        return wrapper

    return decorator
