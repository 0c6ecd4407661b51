"""
Logging helpers: secret masking and execution timing.
"""

import functools
import time
from typing import Callable, Optional

from .logger import get_logger


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """
    Mask secret material for diagnostics.

    Only a short prefix is kept; short values are fully masked.
    """
    if not value:
        return ''
    if len(value) <= visible * 2:
        return '*' * len(value)
    return f"{value[:visible]}...({len(value)} chars)"


def mask_api_key(value: Optional[str], prefix: int = 8, suffix: int = 4) -> str:
    """Mask an API key keeping a prefix and suffix, e.g. ``mx0vglAB...9f3c``."""
    if not value:
        return ''
    if len(value) <= prefix + suffix:
        return value[:2] + '*' * (len(value) - 2)
    return f"{value[:prefix]}...{value[-suffix:]}"


def log_execution_time(logger_name: Optional[str] = None):
    """
    Decorator to log function execution time.

    Args:
        logger_name: Logger name to use, defaults to function's module
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(logger_name or func.__module__)
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Function {func.__name__} failed", extra={
                    'function': func.__name__,
                    'execution_time_seconds': time.time() - start_time,
                    'success': False,
                    'error': str(e)
                }, exc_info=True)
                raise

            logger.info(f"Function {func.__name__} completed", extra={
                'function': func.__name__,
                'execution_time_seconds': time.time() - start_time,
                'success': True
            })
            return result

        return wrapper
    return decorator
