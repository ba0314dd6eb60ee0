"""Dependency tracking context — who is reading reactive state right now.

Uses contextvars to hold the subscriber currently being evaluated, plus a
stack of the readers it interrupted. Every thread and asyncio task sees its
own pointer and stack, so nested evaluations in one context never observe
another's reader.

A Dep asks this module for the current reader when it is read; a Watcher
installs itself here before evaluating its getter and restores the outer
reader afterwards.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from vcore.watcher import Watcher

# The subscriber currently being evaluated, or None.
# None is also written explicitly to switch recording off for a region.
current_reader: contextvars.ContextVar[Watcher | None] = contextvars.ContextVar(
    "current_reader", default=None
)

# Readers interrupted by nested evaluations, innermost last.
# Stored as a tuple so a copied context never shares a mutable stack.
_reader_stack: contextvars.ContextVar[tuple] = contextvars.ContextVar(
    "reader_stack", default=()
)


def get_current_reader() -> Watcher | None:
    return current_reader.get()


def set_current_reader(reader: Watcher | None) -> None:
    """Make reader current, saving the outer reader for clear_to_parent()."""
    _reader_stack.set(_reader_stack.get() + (current_reader.get(),))
    current_reader.set(reader)


def clear_to_parent() -> None:
    """Restore the reader that was current before the last set_current_reader()."""
    stack = _reader_stack.get()
    if stack:
        _reader_stack.set(stack[:-1])
        current_reader.set(stack[-1])
    else:
        current_reader.set(None)


def stack_depth() -> int:
    """Number of saved outer readers. Useful for testing."""
    return len(_reader_stack.get())


@contextmanager
def reading(reader: Watcher | None) -> Iterator[None]:
    """Evaluate a block with reader current; the outer reader is always restored."""
    set_current_reader(reader)
    try:
        yield
    finally:
        clear_to_parent()


def untracked():
    """Evaluate a block without recording dependencies.

    Usage:
        with untracked():
            initial = compute_defaults()  # not attributed to any watcher
    """
    return reading(None)
