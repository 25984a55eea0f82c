"""Totals across a snapshot."""

from collections.abc import Iterable

from proctree.models import ProcessSnapshotEntry, Totals


def dedupe(entries: Iterable[ProcessSnapshotEntry]) -> list[ProcessSnapshotEntry]:
    """Keep the first entry per pid, preserving order."""
    seen: set[int] = set()
    unique: list[ProcessSnapshotEntry] = []
    for entry in entries:
        if entry.pid in seen:
            continue
        seen.add(entry.pid)
        unique.append(entry)
    return unique


def totals(entries: Iterable[ProcessSnapshotEntry]) -> Totals:
    """
    Sum CPU and resident memory over the deduplicated snapshot.

    CPU is not clamped: on multi-core systems the sum may exceed 100%.
    """
    unique = dedupe(entries)
    return Totals(
        cpu_percent=sum(entry.cpu_percent for entry in unique),
        memory_kb=sum(entry.memory_kb for entry in unique),
        process_count=len(unique),
    )
