"""Cross-linked HTML API documentation from program snapshots."""

__version__ = "0.1.0"
