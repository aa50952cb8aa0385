"""Background execution of dispatch requests."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from .coordinator import DispatchCoordinator, DispatchResult

logger = logging.getLogger(__name__)


class DispatchWorkerPool:
    """Run dispatch requests on a bounded executor and schedule their retries.

    ``submit`` returns immediately so the write that opened the request is
    never blocked by delivery.
    """

    def __init__(
        self,
        coordinator: DispatchCoordinator,
        *,
        max_workers: int = 4,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._max_workers = max(1, max_workers)
        self._stop_event = stop_event or threading.Event()
        self._executor: ThreadPoolExecutor | None = None
        self._timers: set[threading.Timer] = set()
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._executor is not None and not self._stop_event.is_set()

    def start(self) -> None:
        with self._lock:
            if self._executor is None:
                self._stop_event.clear()
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="notifier-dispatch"
                )
                logger.info("Dispatch worker pool started with %d workers", self._max_workers)

    def recover(self) -> list[int]:
        """Queue requests left behind by a previous process."""

        request_ids = self._coordinator.recover_unfinished()
        for request_id in request_ids:
            self.submit(request_id)
        if request_ids:
            logger.info("Queued %d dispatch requests on startup", len(request_ids))
        return request_ids

    def submit(self, request_id: int) -> Future | None:
        with self._lock:
            executor = self._executor
            if executor is None or self._stop_event.is_set():
                logger.error(
                    "Dispatch worker pool is not running; request %s stays pending",
                    request_id,
                )
                return None
            return executor.submit(self._run, request_id)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and let in-flight sends finish."""

        self._stop_event.set()
        with self._lock:
            timers = list(self._timers)
            self._timers.clear()
            executor = self._executor
            self._executor = None
        for timer in timers:
            timer.cancel()
        if executor is not None:
            executor.shutdown(wait=wait)
            logger.info("Dispatch worker pool stopped")

    def _run(self, request_id: int) -> DispatchResult | None:
        try:
            result = self._coordinator.dispatch(request_id)
        except Exception:
            logger.exception("Dispatch request %s crashed", request_id)
            return None
        if result is not None and result.should_retry:
            self._schedule_retry(request_id, result.retry_in)
        return result

    def _schedule_retry(self, request_id: int, delay: float) -> None:
        if self._stop_event.is_set():
            return

        timer: threading.Timer

        def fire() -> None:
            with self._lock:
                self._timers.discard(timer)
            self.submit(request_id)

        timer = threading.Timer(delay, fire)
        timer.daemon = True
        with self._lock:
            self._timers.add(timer)
        timer.start()
        logger.debug("Retry of dispatch request %s scheduled in %ss", request_id, delay)


__all__ = ["DispatchWorkerPool"]
