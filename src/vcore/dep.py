"""Dep — the broadcaster behind every reactive slot.

One Dep exists per observable value (a data key, a prop, a computed source).
Reading the slot calls register_dependency(); writing it calls notify().
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

from vcore._tracking import current_reader

if TYPE_CHECKING:
    from vcore.watcher import Watcher

_uid = itertools.count()


class Dep:
    """An observable that can have multiple subscribers."""

    __slots__ = ("id", "subs")

    def __init__(self) -> None:
        self.id = next(_uid)
        self.subs: list[Watcher] = []

    def add_subscriber(self, sub: Watcher) -> None:
        self.subs.append(sub)

    def remove_subscriber(self, sub: Watcher) -> None:
        """Remove the first occurrence of sub. Absent subscribers are ignored."""
        try:
            self.subs.remove(sub)
        except ValueError:
            pass

    def register_dependency(self) -> None:
        """Record this dep on the current reader, if there is one."""
        reader = current_reader.get()
        if reader is not None:
            reader.add_dependency(self)

    def notify(self) -> None:
        """Call update() on every subscriber present when notify() began."""
        # Snapshot: an update may subscribe or unsubscribe while we iterate.
        for sub in list(self.subs):
            sub.update()

    def __repr__(self) -> str:
        return f"Dep(id={self.id}, subs={len(self.subs)})"
