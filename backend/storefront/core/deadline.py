"""
storefront/core/deadline.py - One time budget per operation.

An operation that makes several store calls creates a single `Deadline` up front and hands
each call only the time that is left, so the whole operation never runs past its budget.
"""
import time
from typing import Callable

from storefront.core.errors import Timeout


class Deadline:
    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.expires_at = clock() + seconds

    def remaining(self, operation: str) -> float:
        """Seconds left for the next call; raises Timeout once the budget is spent."""
        left = self.expires_at - self.clock()
        if left <= 0:
            raise Timeout(f"{operation} timed out")
        return left
