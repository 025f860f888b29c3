"""Cleanup module."""

from .cleanup import CleanupManager, CleanupResult

__all__ = ["CleanupManager", "CleanupResult"]
