"""Monitoring engine: the interface the display layer calls into."""

import logging
import threading
import time
from collections.abc import Callable

from proctree import tree
from proctree.aggregate import totals
from proctree.cache import MetadataCache
from proctree.models import ProcessSnapshotEntry, RenderedReport, ViewKind
from proctree.owner import OwnerResolver
from proctree.report import format_header, format_list
from proctree.scheduler import DEFAULT_REFRESH_INTERVAL, RefreshScheduler
from proctree.snapshot import SnapshotSource

logger = logging.getLogger(__name__)


class MonitorEngine:
    """
    Owns the snapshot source, metadata cache and refresh timer.

    The display requests a view, then ticks the engine periodically; the engine
    recomputes at most once per refresh interval (or immediately on a view
    switch) and hands back a complete RenderedReport. At most one refresh runs
    at a time, and a new report replaces the previous one in a single step.
    """

    def __init__(
        self,
        source: SnapshotSource | None = None,
        cache: MetadataCache | None = None,
        interval: float = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        evict_exited: bool = True,
        show_system_memory: bool = True,
    ) -> None:
        """
        Initialize the MonitorEngine.

        Args:
            source: Snapshot source. Defaults to a psutil-backed one.
            cache: Metadata cache. Defaults to one backed by OwnerResolver.
            interval: Minimum seconds between recomputations.
            clock: Time source used when a tick does not pass now.
            evict_exited: Drop cache entries for processes that have exited.
            show_system_memory: Add the system-wide used memory to the header.
        """
        self._source = source if source is not None else SnapshotSource()
        self._cache = cache if cache is not None else MetadataCache(OwnerResolver().resolve)
        self._scheduler = RefreshScheduler(interval)
        self._clock = clock
        self._evict_exited = evict_exited
        self._show_system_memory = show_system_memory
        self._view: ViewKind | None = None
        self._report = RenderedReport(view=None, lines=())
        self._refresh_lock = threading.Lock()
        self._refresh_count = 0

    def __enter__(self) -> "MonitorEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def view(self) -> ViewKind | None:
        """The active view, or None before one is requested."""
        return self._view

    @property
    def cache(self) -> MetadataCache:
        return self._cache

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    @property
    def refresh_count(self) -> int:
        """Number of completed recomputations."""
        return self._refresh_count

    def current_report(self) -> RenderedReport:
        """The last computed report."""
        return self._report

    def request_view(self, kind: ViewKind, now: float | None = None) -> RenderedReport:
        """Switch to a view and refresh immediately."""
        self._view = kind
        return self._refresh(self._now(now), forced=True)

    def request_refresh_if_due(self, now: float | None = None) -> RenderedReport:
        """Advance one tick; recompute only if the refresh interval has elapsed."""
        if self._view is None:
            return self._report
        now = self._now(now)
        if not self._scheduler.due(now):
            return self._report
        return self._refresh(now, forced=False)

    def clear_view(self) -> None:
        """Leave the active view; ticks become no-ops until a view is requested."""
        self._view = None
        self._scheduler.reset()

    def close(self) -> None:
        """Release engine state."""
        self._view = None
        self._cache.clear()
        self._report = RenderedReport(view=None, lines=())

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now

    def _refresh(self, now: float, forced: bool) -> RenderedReport:
        # A timed tick never queues behind a running refresh; a view switch does.
        if not self._refresh_lock.acquire(blocking=forced):
            return self._report
        try:
            view = self._view
            if view is None:
                return self._report

            entries = self._source.acquire()
            lines = self._render(view, entries)

            if self._evict_exited:
                self._cache.evict_missing(entry.cache_key for entry in entries)

            self._refresh_count += 1
            self._report = RenderedReport(
                view=view,
                lines=tuple(lines),
                generation=self._report.generation + 1,
                generated_at=now,
            )
            self._scheduler.mark(now)
            logger.debug(
                "Refreshed %s view: %d processes, %d cached",
                view.value,
                len(entries),
                len(self._cache),
            )
            return self._report
        finally:
            self._refresh_lock.release()

    def _render(self, view: ViewKind, entries: list[ProcessSnapshotEntry]) -> list[str]:
        system_memory_kb = (
            self._source.system_memory_used_kb() if self._show_system_memory else None
        )
        lines = format_header(totals(entries), system_memory_kb)
        metadata_for = self._cache.get_or_compute

        if view is ViewKind.LIST:
            lines.extend(format_list(entries, metadata_for))
        else:
            lines.extend(tree.render(tree.build(entries), entries, metadata_for))
        return lines
