"""Runtime configuration for proctree."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from proctree.cache import MetadataCache
from proctree.engine import MonitorEngine
from proctree.owner import OwnerResolver
from proctree.scheduler import DEFAULT_REFRESH_INTERVAL
from proctree.snapshot import SnapshotSource

ENV_PREFIX = "PROCTREE_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name}: expected a boolean, got {raw!r}")


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name}: expected a number, got {raw!r}") from None


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Engine and front-end settings."""

    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    poll_rate: float = 1.0
    evict_exited: bool = True
    log_level: str = "WARNING"
    log_file: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MonitorConfig":
        """Build a config from PROCTREE_* environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()

        def lookup(key: str) -> str | None:
            return env.get(ENV_PREFIX + key)

        interval = lookup("REFRESH_INTERVAL")
        poll_rate = lookup("POLL_RATE")
        evict = lookup("EVICT_EXITED")

        return cls(
            refresh_interval=(
                _parse_float("PROCTREE_REFRESH_INTERVAL", interval)
                if interval is not None
                else defaults.refresh_interval
            ),
            poll_rate=(
                _parse_float("PROCTREE_POLL_RATE", poll_rate)
                if poll_rate is not None
                else defaults.poll_rate
            ),
            evict_exited=(
                _parse_bool("PROCTREE_EVICT_EXITED", evict)
                if evict is not None
                else defaults.evict_exited
            ),
            log_level=(lookup("LOG_LEVEL") or defaults.log_level).upper(),
            log_file=lookup("LOG_FILE") or defaults.log_file,
        )

    def build_engine(self) -> MonitorEngine:
        """Create an engine wired to the live OS."""
        return MonitorEngine(
            source=SnapshotSource(),
            cache=MetadataCache(OwnerResolver().resolve),
            interval=self.refresh_interval,
            evict_exited=self.evict_exited,
        )


def configure_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        filename=log_file,
        force=True,
    )
