"""
Instrumentation decorators shared by the migration stages.
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)


def timed(func: Optional[Callable] = None, *, label: Optional[str] = None) -> Union[Callable, Callable[[Callable], Callable]]:
    """
    Log how long a stage took, and whether it failed.

    Usable bare (``@timed``) or with a label (``@timed(label="emit")``).
    """
    def decorator(fn: Callable) -> Callable:
        name = label or fn.__name__

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
            except Exception as e:
                logger.debug(f"{name} failed after {time.perf_counter() - start:.3f}s: {type(e).__name__}")
                raise
            logger.debug(f"{name} completed in {time.perf_counter() - start:.3f}s")
            return result
        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
