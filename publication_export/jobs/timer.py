"""Background trigger running discovery, scheduling and retries on an interval."""

from __future__ import annotations

import logging
import threading

from .discoverer import PublicationRequestDiscoverer
from .interfaces import SchedulerPort

logger = logging.getLogger(__name__)


class PeriodicPublicationTrigger:
    """Daemon thread invoking the publication entry points on a fixed interval.

    One tick discovers due publication requests, drains scheduled jobs and
    sweeps retryable failures. The first tick runs right after `start`.
    """

    def __init__(
        self,
        discoverer: PublicationRequestDiscoverer,
        scheduler: SchedulerPort,
        interval_seconds: float = 60.0,
    ):
        """Initialize periodic trigger.

        Args:
            discoverer: Discoverer creating jobs for due publication requests.
            scheduler: Scheduler executing jobs.
            interval_seconds: Delay between two ticks.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when interval_seconds is not positive.
        """

        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._discoverer = discoverer
        self._scheduler = scheduler
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Whether the background thread is alive."""

        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background thread, ignored when already running."""

        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._timer_loop, name="publication-trigger", daemon=True)
        self._thread.start()
        logger.info("Publication trigger started (interval: %.1fs)", self._interval_seconds)

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the background thread to stop and wait for it.

        Args:
            timeout: Maximum seconds to wait for a running tick to end.
        """

        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Publication trigger stopped")

    def timer_tick(self) -> None:
        """Run discovery, the scheduler and the retry sweep once."""

        logger.info("Kaleidos publication polling triggered")
        try:
            self._discoverer.discoverer_trigger_publications()
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Polling Kaleidos for publication activities failed")
        self._scheduler.scheduler_run_next()
        logger.info("Retrying failed public export jobs")
        self._scheduler.scheduler_retry_failed()

    def _timer_loop(self) -> None:
        self.timer_tick()
        while not self._stop_event.wait(timeout=self._interval_seconds):
            self.timer_tick()
