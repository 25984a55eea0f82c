"""Shared fakes for proctree tests."""

import pytest

from proctree.models import ProcessSnapshotEntry


def make_entry(pid, ppid=0, cpu=0.0, mem=0, name=None, exe=None, create_time=100.0):
    """Build a snapshot entry with readable defaults."""
    return ProcessSnapshotEntry(
        pid=pid,
        ppid=ppid,
        name=name if name is not None else f"proc{pid}",
        exe=exe if exe is not None else f"/usr/bin/proc{pid}",
        cpu_percent=cpu,
        memory_kb=mem,
        create_time=create_time,
    )


class FakeSource:
    """Snapshot source returning canned entries."""

    def __init__(self, entries=None, system_memory_kb=4096):
        self.entries = list(entries or [])
        self.system_memory_kb = system_memory_kb
        self.calls = 0

    def acquire(self):
        self.calls += 1
        return list(self.entries)

    def system_memory_used_kb(self):
        return self.system_memory_kb


class CountingResolver:
    """Owner resolver that records every pid it is asked about."""

    def __init__(self, owners=None, default="alice"):
        self.owners = owners or {}
        self.default = default
        self.calls: list[int] = []

    def __call__(self, pid):
        self.calls.append(pid)
        return self.owners.get(pid, self.default)


@pytest.fixture
def resolver():
    return CountingResolver()


@pytest.fixture
def two_process_snapshot():
    return [
        make_entry(1, ppid=0, cpu=10.0, mem=1000, name="init"),
        make_entry(2, ppid=1, cpu=5.0, mem=500, name="shell"),
    ]
