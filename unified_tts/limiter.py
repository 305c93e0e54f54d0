from __future__ import annotations

import logging
import math
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar, Union

from .errors import InvalidConcurrencyBudgetError

logger = logging.getLogger(__name__)

__all__ = ["ConcurrencyLimiter", "validate_budget"]

T = TypeVar("T")

Budget = Optional[Union[int, float]]


def validate_budget(budget: Budget) -> Optional[int]:
    """
    Normalise a concurrency budget.

    ``None`` and ``math.inf`` mean unbounded and return ``None``. Any other value
    must be a positive integer (integral floats such as ``2.0`` are accepted).
    """
    if budget is None:
        return None
    if isinstance(budget, bool) or not isinstance(budget, (int, float)):
        raise InvalidConcurrencyBudgetError(
            f"Concurrency budget must be a positive integer or unbounded, got {budget!r}"
        )
    if isinstance(budget, float):
        if math.isinf(budget) and budget > 0:
            return None
        if math.isnan(budget) or not budget.is_integer():
            raise InvalidConcurrencyBudgetError(
                f"Concurrency budget must be a whole number, got {budget!r}"
            )
    if budget <= 0:
        raise InvalidConcurrencyBudgetError(
            f"Concurrency budget must be positive, got {budget!r}"
        )
    return int(budget)


class ConcurrencyLimiter:
    """
    Gate that keeps at most ``budget`` calls running at once.

    Calls made through :meth:`call` hold a slot for their whole duration. The
    in-flight counter is the only state shared between worker threads and is
    only touched under ``_lock``.
    """

    def __init__(self, budget: Budget = None) -> None:
        self.budget = validate_budget(budget)
        self._semaphore = (
            threading.BoundedSemaphore(self.budget) if self.budget is not None else None
        )
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def unbounded(self) -> bool:
        return self.budget is None

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        with self._lock:
            return self._peak_in_flight

    def max_workers(self, task_count: int) -> int:
        """
        Worker pool size needed to run ``task_count`` tasks under this budget.
        """
        task_count = max(1, task_count)
        if self.budget is None:
            return task_count
        return min(self.budget, task_count)

    def call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        with self.slot():
            return fn(*args, **kwargs)

    @contextmanager
    def slot(self) -> Iterator[None]:
        if self._semaphore is not None:
            self._semaphore.acquire()
        try:
            with self._lock:
                self._in_flight += 1
                self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
                current = self._in_flight
            logger.debug("Slot acquired (%d in flight, budget %s).", current, self._describe_budget())
            yield
        finally:
            with self._lock:
                self._in_flight -= 1
            if self._semaphore is not None:
                self._semaphore.release()

    def _describe_budget(self) -> str:
        return "unbounded" if self.budget is None else str(self.budget)

    def __repr__(self) -> str:
        return f"ConcurrencyLimiter(budget={self._describe_budget()})"
