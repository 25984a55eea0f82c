"""Parent/child tree construction and indented rendering."""

from collections.abc import Iterable

from proctree.aggregate import dedupe
from proctree.models import ProcessSnapshotEntry
from proctree.report import LINE_PREFIX, MetadataLookup, format_columns, format_row

ROOT_PID = 0
ROOT_LABEL = "[System] (PID: 0)"
INDENT = "  "
BRANCH = "- "

# Name column width per depth; the indent grows by two columns per level, so
# narrowing the name keeps the remaining columns aligned through depth 6.
NAME_WIDTHS = (44, 42, 40, 38, 36, 34, 32)
TREE_NAME_COLUMN = NAME_WIDTHS[0] + len(BRANCH)

ProcessTree = dict[int, list[int]]


def name_width(depth: int) -> int:
    """Name column width at a depth, clamped to the deepest table entry."""
    return NAME_WIDTHS[min(depth, len(NAME_WIDTHS) - 1)]


def build(entries: Iterable[ProcessSnapshotEntry]) -> ProcessTree:
    """
    Map each parent pid to its children, in snapshot order.

    A process whose parent is not live (or unknown, or itself) is attached to
    the synthetic root.
    """
    unique = dedupe(entries)
    live = {entry.pid for entry in unique}
    tree: ProcessTree = {}

    for entry in unique:
        if entry.pid == ROOT_PID:
            continue
        parent = entry.ppid
        if parent not in live or parent == entry.pid:
            parent = ROOT_PID
        tree.setdefault(parent, []).append(entry.pid)

    return tree


def render(
    tree: ProcessTree,
    entries: Iterable[ProcessSnapshotEntry],
    metadata_for: MetadataLookup,
) -> list[str]:
    """
    Depth-first pre-order walk from the root, one line per process.

    The walk uses an explicit stack, so deep trees do not hit the recursion
    limit, and a visited set, so a cyclic parent table cannot loop forever.
    Processes unreachable from the root are rendered as root children.
    """
    by_pid = {entry.pid: entry for entry in dedupe(entries)}
    lines = [format_columns(TREE_NAME_COLUMN)]
    visited: set[int] = set()

    def walk(start: int, start_depth: int) -> None:
        stack = [(start, start_depth)]
        while stack:
            pid, depth = stack.pop()
            if pid in visited:
                continue
            visited.add(pid)

            prefix = INDENT * depth + BRANCH
            entry = by_pid.get(pid)
            if entry is not None:
                lines.append(
                    format_row(entry, metadata_for(entry), name_width(depth), prefix)
                )
            elif pid == ROOT_PID:
                lines.append(f"{LINE_PREFIX}{prefix}{ROOT_LABEL}")

            children = tree.get(pid, ())
            stack.extend((child, depth + 1) for child in reversed(children))

    walk(ROOT_PID, 0)
    for pid in by_pid:
        if pid not in visited:
            walk(pid, 1)

    return lines
