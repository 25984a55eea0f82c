"""Exceptions raised by proctree."""


class ProcTreeError(Exception):
    """Base class for proctree errors."""


class SnapshotError(ProcTreeError):
    """The OS process table could not be read at all."""
