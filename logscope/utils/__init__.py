"""Utility helpers for single-fire disposal and context-aware threads."""

from .disposable import Disposable
from .threads import current_branch_id, flowing, spawn, spawn_unflowed

__all__ = [
    # Disposal
    "Disposable",
    # Threads
    "current_branch_id",
    "flowing",
    "spawn",
    "spawn_unflowed",
]
