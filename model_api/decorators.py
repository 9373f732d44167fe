import functools
import logging
import time
from typing import Callable, TypeVar

T = TypeVar('T')

LOGGER = logging.getLogger(__name__)


def log_request(func: Callable[..., T]) -> Callable[..., T]:
    """Log API requests for debugging"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        provider = args[0].__class__.__name__ if args else "Unknown"
        request = args[1] if len(args) > 1 else kwargs.get("request")
        model = getattr(request, "model_name", None) or getattr(args[0], "model_name", None)
        LOGGER.debug("[%s] Calling %s (model=%s)", provider, func.__name__, model)

        started = time.monotonic()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            LOGGER.warning("[%s] %s failed: %s", provider, func.__name__, e)
            raise
        LOGGER.debug(
            "[%s] %s succeeded in %.1fs", provider, func.__name__, time.monotonic() - started
        )
        return result

    return wrapper
