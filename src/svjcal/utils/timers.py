import functools
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Timer:
    """
    Context manager and decorator for timing code execution.
    """

    def __init__(self, name: str = "operation", log_level: int = logging.INFO):
        self.name = name
        self.log_level = log_level
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        logger.log(self.log_level, f"Starting {self.name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        if exc_type is None:
            logger.log(self.log_level, f"Completed {self.name} in {self.elapsed:.3f}s")
        else:
            logger.log(self.log_level, f"{self.name} failed after {self.elapsed:.3f}s")

    def __call__(self, func: Callable) -> Callable:
        """Use as decorator."""
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with Timer(self.name if self.name != "operation" else func.__name__, self.log_level):
                return func(*args, **kwargs)
        return wrapper
