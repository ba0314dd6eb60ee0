"""Textual host binding for vcore components. Opt-in — requires textual.

Bridges watcher callbacks into a Textual app: callbacks are skipped while the
app is paused or not running, NoMatches from widget queries is swallowed,
and callbacks fired from other threads are marshaled with call_from_thread.

The pause state is owned by this module and keyed by id(app), so several
apps (in tests) do not interfere.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from vcore.watcher import Watcher

_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded callbacks during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, fn):
    main = threading.get_ident()

    def safe(*args):
        try:
            fn(*args)
        except NoMatches:
            pass

    def guarded(*args):
        if not is_safe(app):
            return
        if threading.get_ident() != main:
            app.call_from_thread(safe, *args)
        else:
            safe(*args)

    return guarded


def watch(app, vm, expr_or_fn, effect, *, immediate=False):
    """vm.watch() whose effect(new, old) safely touches Textual widgets.

    Returns the unwatch function.
    """
    return vm.watch(expr_or_fn, _guard(app, effect), immediate=immediate)


def autorun(app, vm, fn):
    """Run fn(vm) now and again whenever state it reads changes.

    Same guards as watch(). Returns the Watcher (call .teardown() to stop).
    """
    return Watcher(vm, _guard(app, fn))


def bind(app, vm, selector: str, method: str = "update"):
    """Push vm's render output into the widget matching selector.

    The widget's method (default: update) is called with each new render
    result, including the initial one. Returns the unwatch function.
    """

    def push(output, old=None):
        getattr(app.query_one(selector), method)(output)

    return watch(app, vm, lambda vm: vm._render(), push, immediate=True)
