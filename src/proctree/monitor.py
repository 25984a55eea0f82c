"""Background driver that ticks the engine off the UI thread."""

import logging
import threading
from queue import Queue

from proctree.engine import MonitorEngine
from proctree.models import RenderedReport, ViewKind

logger = logging.getLogger(__name__)


class ReportPoller:
    """
    Ticks a MonitorEngine from a daemon thread.

    Pushes every newly computed RenderedReport to a thread-safe Queue. The
    engine decides whether a tick recomputes; the poller only sets the cadence.
    View switches requested through the poller are computed on its thread too,
    so snapshots never overlap and never block the caller.
    """

    def __init__(
        self,
        engine: MonitorEngine,
        update_queue: Queue[RenderedReport],
        poll_rate: float = 1.0,
    ) -> None:
        """
        Initialize the ReportPoller.

        Args:
            engine: Engine to drive.
            update_queue: Thread-safe queue to push new reports to.
            poll_rate: Seconds between ticks. Default 1.0s.
        """
        self._engine = engine
        self._queue = update_queue
        self._poll_rate = max(0.1, poll_rate)
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._pending_lock = threading.Lock()
        self._pending_view: ViewKind | None = None
        self._pending_clear = False
        self._last_generation = engine.current_report().generation
        self._thread: threading.Thread | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the poller thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def request_view(self, kind: ViewKind) -> None:
        """Ask for a view switch; it is computed on the next loop iteration."""
        with self._pending_lock:
            self._pending_view = kind
            self._pending_clear = False
        self._wake_event.set()

    def clear_view(self) -> None:
        """Ask the engine to leave its view; applied on the poller thread."""
        with self._pending_lock:
            self._pending_view = None
            self._pending_clear = True
        self._wake_event.set()

    def start(self) -> None:
        """Start the poller thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="ReportPoller",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the poller thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        self._wake_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def tick(self) -> RenderedReport | None:
        """Run one iteration. Returns the report if it is new, else None."""
        with self._pending_lock:
            view, self._pending_view = self._pending_view, None
            clear, self._pending_clear = self._pending_clear, False

        if clear:
            self._engine.clear_view()
            return None
        if view is not None:
            report = self._engine.request_view(view)
        else:
            report = self._engine.request_refresh_if_due()

        if report.generation == self._last_generation:
            return None
        self._last_generation = report.generation
        self._queue.put(report)
        return report

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                # Keep the loop alive; the next tick retries
                logger.exception("Refresh tick failed")

            # Wait for poll_rate seconds, a view request, or a stop request
            self._wake_event.wait(timeout=self._poll_rate)
            self._wake_event.clear()
