"""Introspection provider: mirror snapshots of a reflected program."""

from .loader import SnapshotError, load_program_data, load_snapshot

__all__ = ["SnapshotError", "load_program_data", "load_snapshot"]
