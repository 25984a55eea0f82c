"""Refresh throttling, independent of any UI toolkit."""

DEFAULT_REFRESH_INTERVAL = 5.0


def should_refresh(
    now: float,
    last_refresh: float | None,
    min_interval: float = DEFAULT_REFRESH_INTERVAL,
    forced: bool = False,
) -> bool:
    """Whether a new snapshot should be computed at time now."""
    if forced or last_refresh is None:
        return True
    return now - last_refresh >= min_interval


class RefreshScheduler:
    """Tracks the last refresh time and answers should_refresh for it."""

    def __init__(self, min_interval: float = DEFAULT_REFRESH_INTERVAL) -> None:
        self.min_interval = min_interval
        self._last_refresh: float | None = None

    @property
    def last_refresh(self) -> float | None:
        return self._last_refresh

    def due(self, now: float, forced: bool = False) -> bool:
        return should_refresh(now, self._last_refresh, self.min_interval, forced)

    def mark(self, now: float) -> None:
        self._last_refresh = now

    def reset(self) -> None:
        self._last_refresh = None
