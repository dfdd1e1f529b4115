"""Persistence for theme snapshots."""

from .snapshots import ThemeSnapshotStore

__all__ = ["ThemeSnapshotStore"]
