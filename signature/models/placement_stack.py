"""
Client-side undo/redo history of stamp placements.

Only the most recent placement is committed; earlier entries are discarded,
never merged into one document.

Limitation: redo history does not survive a page re-render. The client calls
``invalidate_redo()`` after re-rendering, after which ``redo()`` returns None
and the user has to place the stamp again.
"""
from __future__ import annotations

from typing import List, Optional

from .annotation_placement import AnnotationPlacement


class PlacementStack:
    def __init__(self, limit: int = 50) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self._limit = limit
        self._done: List[AnnotationPlacement] = []
        self._undone: List[AnnotationPlacement] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._done)

    @property
    def can_redo(self) -> bool:
        return bool(self._undone)

    def __len__(self) -> int:
        return len(self._done)

    def current(self) -> Optional[AnnotationPlacement]:
        return self._done[-1] if self._done else None

    def push(self, placement: AnnotationPlacement) -> None:
        self._done.append(placement)
        if len(self._done) > self._limit:
            # oldest entry falls off
            del self._done[0]
        self._undone.clear()

    def undo(self) -> Optional[AnnotationPlacement]:
        if not self._done:
            return None
        item = self._done.pop()
        self._undone.append(item)
        return item

    def redo(self) -> Optional[AnnotationPlacement]:
        if not self._undone:
            return None
        item = self._undone.pop()
        self._done.append(item)
        return item

    def invalidate_redo(self) -> None:
        self._undone.clear()

    def clear(self) -> None:
        self._done.clear()
        self._undone.clear()

    def commit(self) -> Optional[AnnotationPlacement]:
        """Return the last placement and reset the history."""
        last = self.current()
        self.clear()
        return last
