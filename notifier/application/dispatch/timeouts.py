"""Run blocking transport calls under a time budget."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, TypeVar

from notifier.domain.exceptions import DeliveryTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundedCaller:
    """Execute callables on a private pool and give up after ``timeout`` seconds.

    A timed-out call keeps running in its thread until the transport returns;
    the caller only stops waiting for it.
    """

    def __init__(self, max_workers: int, *, thread_name_prefix: str = "notifier-io") -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=thread_name_prefix
        )

    def call(self, func: Callable[..., T], *args: Any, timeout: float, **kwargs: Any) -> T:
        future = self._executor.submit(func, *args, **kwargs)
        try:
            return future.result(timeout=timeout)
        except FutureTimeout as exc:
            future.cancel()
            name = getattr(func, "__qualname__", repr(func))
            logger.warning("Call to %s exceeded %.1fs", name, timeout)
            raise DeliveryTimeout(f"Delivery timed out after {timeout:g}s") from exc

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)


__all__ = ["BoundedCaller"]
