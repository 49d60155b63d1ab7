"""Single place where acquisition failures become empty results.

Network calls, payload validation and parsing in the discovery pipeline are
all "best effort": a failure means "no document found", never an error the
caller has to handle. Wrapping them with @fallible keeps that conversion in
one spot instead of scattering try/except blocks.
"""
import functools
import logging
from typing import Any, Callable, Optional, TypeVar

F = TypeVar('F', bound=Callable[..., Any])


def fallible(default: Any = None, *, factory: Optional[Callable[[], Any]] = None,
             level: int = logging.DEBUG, message: str = "") -> Callable[[F], F]:
    """
    Decorator: on any exception, log it and return an empty result.

    Args:
        default: Value returned on failure (use `factory` for mutable values)
        factory: Callable producing a fresh empty value on failure
        level: Log level for the swallowed exception
        message: Prefix for the log line (defaults to the function name)

    Usage:
        @fallible(factory=list, level=logging.WARNING)
        def extract_links(data): ...
    """
    def decorator(func: F) -> F:
        logger = logging.getLogger(func.__module__)
        label = message or f"{func.__name__} failed"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.log(level, f"{label}: {e}")
                return factory() if factory is not None else default

        return wrapper  # type: ignore[return-value]

    return decorator
