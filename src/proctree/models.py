"""Data models for proctree."""

from dataclasses import dataclass
from enum import Enum


class ViewKind(Enum):
    """Views the engine can render."""

    LIST = "list"
    TREE = "tree"


@dataclass(slots=True, frozen=True)
class ProcessSnapshotEntry:
    """Transient per-process metrics from a single snapshot."""

    pid: int
    ppid: int  # 0 when unknown
    name: str
    exe: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_kb: int  # Resident set size
    create_time: float = 0.0

    @property
    def cache_key(self) -> tuple[int, float]:
        """Key identifying this process across snapshots."""
        return (self.pid, self.create_time)


@dataclass(slots=True, frozen=True)
class ProcessMetadata:
    """Slow-changing attributes, computed once per process."""

    name: str
    exe_path: str
    username: str


@dataclass(slots=True, frozen=True)
class Totals:
    """System-wide sums over a deduplicated snapshot."""

    cpu_percent: float
    memory_kb: int
    process_count: int


@dataclass(slots=True, frozen=True)
class RenderedReport:
    """Text lines handed to the display, replaced wholesale on refresh."""

    view: ViewKind | None
    lines: tuple[str, ...]
    generation: int = 0
    generated_at: float | None = None
