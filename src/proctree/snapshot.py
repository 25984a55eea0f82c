"""Snapshot source: reads the OS process table through psutil."""

import logging

import psutil

from proctree.errors import SnapshotError
from proctree.models import ProcessSnapshotEntry

logger = logging.getLogger(__name__)

# Attributes fetched for every process in one pass
SNAPSHOT_ATTRS = [
    "pid",
    "ppid",
    "name",
    "exe",
    "cpu_percent",
    "memory_info",
    "create_time",
]


class SnapshotSource:
    """
    Produces point-in-time lists of live processes.

    Processes that exit or deny access while being read are skipped, so one
    bad process never aborts the whole snapshot.
    """

    def __init__(self, prime: bool = True) -> None:
        """
        Initialize the SnapshotSource.

        Args:
            prime: Take a throwaway reading so per-process CPU counters have
                a baseline (psutil reports 0.0 on the first call).
        """
        if prime:
            for proc in psutil.process_iter():
                try:
                    proc.cpu_percent(interval=None)
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    continue

    def acquire(self) -> list[ProcessSnapshotEntry]:
        """
        Read every live process once.

        Returns entries in OS iteration order, deduplicated by pid.

        Raises:
            SnapshotError: If the process table itself cannot be read.
        """
        entries: list[ProcessSnapshotEntry] = []
        seen: set[int] = set()

        try:
            for proc in psutil.process_iter(attrs=SNAPSHOT_ATTRS, ad_value=None):
                try:
                    entry = self._to_entry(proc.info)
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    continue
                if entry is None or entry.pid in seen:
                    continue
                seen.add(entry.pid)
                entries.append(entry)
        except (OSError, psutil.Error) as exc:
            raise SnapshotError(f"cannot read process table: {exc}") from exc

        logger.debug("Snapshot acquired with %d processes", len(entries))
        return entries

    @staticmethod
    def _to_entry(info: dict) -> ProcessSnapshotEntry | None:
        pid = info.get("pid")
        if pid is None:
            return None

        mem_info = info.get("memory_info")
        memory_kb = mem_info.rss // 1024 if mem_info else 0

        return ProcessSnapshotEntry(
            pid=pid,
            ppid=info.get("ppid") or 0,
            name=info.get("name") or "",
            exe=info.get("exe") or "",
            cpu_percent=max(0.0, info.get("cpu_percent") or 0.0),
            memory_kb=memory_kb,
            create_time=info.get("create_time") or 0.0,
        )

    @staticmethod
    def system_memory_used_kb() -> int:
        """System-wide used memory in KiB."""
        return psutil.virtual_memory().used // 1024
