"""Text formatting for the totals header and the flat list view."""

from collections.abc import Callable, Iterable

from proctree.aggregate import dedupe
from proctree.models import ProcessMetadata, ProcessSnapshotEntry, Totals

LINE_PREFIX = "  "
LIST_NAME_WIDTH = 40
PID_WIDTH = 8
CPU_WIDTH = 10
MEMORY_WIDTH = 15
PATH_WIDTH = 60
USER_WIDTH = 17

MetadataLookup = Callable[[ProcessSnapshotEntry], ProcessMetadata]


def format_header(totals: Totals, system_memory_kb: int | None = None) -> list[str]:
    """Summary lines shown above either view."""
    lines = [
        f"{LINE_PREFIX}Total CPU used: {totals.cpu_percent:.2f}%",
        f"{LINE_PREFIX}Total memory used: {totals.memory_kb} KB",
        f"{LINE_PREFIX}Processes: {totals.process_count}",
    ]
    if system_memory_kb is not None:
        lines.append(f"{LINE_PREFIX}System memory used: {system_memory_kb} KB")
    return lines


def format_columns(name_width: int = LIST_NAME_WIDTH) -> str:
    """Column titles, with the name column padded to name_width."""
    return (
        f"{LINE_PREFIX}{'Process Name':<{name_width}} {'PID':<{PID_WIDTH}} "
        f"{'CPU (%)':<{CPU_WIDTH}} {'Memory (KB)':<{MEMORY_WIDTH}} "
        f"{'Executable Path':<{PATH_WIDTH}} {'User':<{USER_WIDTH}}"
    ).rstrip()


def format_row(
    entry: ProcessSnapshotEntry,
    metadata: ProcessMetadata,
    name_width: int = LIST_NAME_WIDTH,
    prefix: str = "",
) -> str:
    """One process row. prefix goes before the name (tree indentation)."""
    return (
        f"{LINE_PREFIX}{prefix}{metadata.name:<{name_width}} {entry.pid:<{PID_WIDTH}} "
        f"{entry.cpu_percent:<{CPU_WIDTH}.2f} {entry.memory_kb:<{MEMORY_WIDTH}} "
        f"{metadata.exe_path:<{PATH_WIDTH}} {metadata.username:<{USER_WIDTH}}"
    ).rstrip()


def format_list(
    entries: Iterable[ProcessSnapshotEntry],
    metadata_for: MetadataLookup,
) -> list[str]:
    """Column header followed by one row per unique pid."""
    lines = [format_columns()]
    for entry in dedupe(entries):
        lines.append(format_row(entry, metadata_for(entry)))
    return lines
