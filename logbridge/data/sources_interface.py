"""
This module builds the log source the bridge reads from.
Sources are imported lazily so the journal bindings are only needed when the
journal is actually selected.
"""

SOURCE_KINDS = ("memory", "systemd")


def create_source(kind, **options):
    """
    Build a source by name.

    `options` are passed to the source constructor (time_period,
    custom_start_time, and for the journal, journal_path).
    """
    if kind == "memory":
        from .sources.memory.memory_source import MemorySource
        return MemorySource(**options)
    if kind == "systemd":
        from .sources.systemd.systemd_source import JournalSource
        return JournalSource(**options)
    raise ValueError(f"unknown source kind {kind!r}, expected one of {', '.join(SOURCE_KINDS)}")
