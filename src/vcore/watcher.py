"""Watcher — the subscriber side of dependency tracking.

A Watcher evaluates a getter with itself installed as the current reader,
collecting every Dep touched along the way. When one of those deps notifies,
the watcher re-evaluates (or, when lazy, just marks itself dirty).

Three flavors are built from this one class:
- render watchers (mount): re-run the render function on change;
- computed watchers (lazy=True): cache a value, recompute on next read;
- user watchers (user=True): call a callback with (new, old).

There is no scheduler: update() re-runs synchronously.
"""

from __future__ import annotations

import itertools
import re
from typing import Any, Callable

from vcore._tracking import clear_to_parent, set_current_reader
from vcore.debug import warn
from vcore.dep import Dep
from vcore.errors import handle_error, invoke_with_error_handling
from vcore.observable import ReactiveDict, ReactiveList, is_reactive, same_value

_uid = itertools.count(1)

_bail_re = re.compile(r"[^\w.]")


def parse_path(path: str) -> Callable[[Any], Any] | None:
    """Build a getter for a dotted path like 'user.name'.

    Each segment is looked up as a key on mappings and as an attribute
    otherwise. Returns None for paths with characters other than word
    characters and dots.
    """
    if _bail_re.search(path):
        return None
    segments = path.split(".")

    def getter(obj):
        for segment in segments:
            if obj is None:
                return None
            if isinstance(obj, (dict, ReactiveDict)):
                obj = obj.get(segment)
            elif isinstance(obj, ReactiveList) and segment.isdigit():
                obj = obj[int(segment)]
            else:
                obj = getattr(obj, segment, None)
        return obj

    return getter


def traverse(value: Any) -> None:
    """Read every nested reactive slot so a deep watcher depends on all of them."""
    _traverse(value, set())


def _traverse(value: Any, seen: set[int]) -> None:
    if not is_reactive(value):
        return
    if id(value) in seen:
        return
    seen.add(id(value))
    if isinstance(value, ReactiveDict):
        for key in value:
            _traverse(value[key], seen)
    else:
        for item in value:
            _traverse(item, seen)


def _noop(*args) -> None:
    return None


class Watcher:
    """Evaluates an expression, tracks its deps, reacts when they change."""

    def __init__(
        self,
        vm,
        expr_or_fn: str | Callable[[Any], Any],
        cb: Callable[[Any, Any], Any] | None = None,
        *,
        deep: bool = False,
        user: bool = False,
        lazy: bool = False,
        before: Callable[[], Any] | None = None,
        is_render_watcher: bool = False,
    ) -> None:
        self.vm = vm
        if vm is not None:
            if is_render_watcher:
                vm._watcher = self
            vm._watchers.append(self)
        self.cb = cb or _noop
        self.deep = deep
        self.user = user
        self.lazy = lazy
        self.before = before
        self.id = next(_uid)
        self.active = True
        self.dirty = lazy
        self.deps: list[Dep] = []
        self.new_deps: list[Dep] = []
        self.dep_ids: set[int] = set()
        self.new_dep_ids: set[int] = set()
        if callable(expr_or_fn):
            self.expression = getattr(expr_or_fn, "__name__", repr(expr_or_fn))
            self.getter = expr_or_fn
        else:
            self.expression = expr_or_fn
            getter = parse_path(expr_or_fn)
            if getter is None:
                warn(
                    f'Failed watching path: "{expr_or_fn}" Watcher only accepts simple '
                    "dot-delimited paths. For full control, use a function instead.",
                    vm,
                )
                getter = _noop
            self.getter = getter
        self.value = None if lazy else self.get()

    def get(self) -> Any:
        """Evaluate the getter and re-collect dependencies."""
        set_current_reader(self)
        value = None
        try:
            value = self.getter(self.vm)
        except Exception as err:
            if not self.user:
                raise
            handle_error(err, self.vm, f'getter for watcher "{self.expression}"')
        finally:
            # Deep reads must be attributed to this watcher too.
            if self.deep:
                traverse(value)
            clear_to_parent()
            self.cleanup_deps()
        return value

    def add_dependency(self, dep: Dep) -> None:
        """Record dep for this pass. Repeated reads of one dep are ignored."""
        if dep.id in self.new_dep_ids:
            return
        self.new_dep_ids.add(dep.id)
        self.new_deps.append(dep)
        if dep.id not in self.dep_ids:
            dep.add_subscriber(self)

    def cleanup_deps(self) -> None:
        """Drop subscriptions to deps the last pass no longer read."""
        for dep in self.deps:
            if dep.id not in self.new_dep_ids:
                dep.remove_subscriber(self)
        self.dep_ids, self.new_dep_ids = self.new_dep_ids, self.dep_ids
        self.new_dep_ids.clear()
        self.deps, self.new_deps = self.new_deps, self.deps
        self.new_deps.clear()

    def update(self) -> None:
        """Called by a Dep when one of our dependencies changed."""
        if self.lazy:
            self.dirty = True
            return
        if self.before is not None:
            self.before()
        self.run()

    def run(self) -> None:
        if not self.active:
            return
        value = self.get()
        if (
            not same_value(self.value, value)
            or is_reactive(value)
            or isinstance(value, (dict, list))
            or self.deep
        ):
            old_value = self.value
            self.value = value
            if self.user:
                invoke_with_error_handling(
                    self.cb,
                    self.vm,
                    (value, old_value),
                    f'callback for watcher "{self.expression}"',
                )
            else:
                self.cb(value, old_value)

    def evaluate(self) -> None:
        """Compute the value of a lazy watcher."""
        self.value = self.get()
        self.dirty = False

    def depend(self) -> None:
        """Register all of this watcher's deps on the current reader."""
        for dep in self.deps:
            dep.register_dependency()

    def teardown(self) -> None:
        """Unsubscribe from every dep. The watcher becomes inert."""
        if not self.active:
            return
        vm = self.vm
        if vm is not None and not vm._is_being_destroyed:
            try:
                vm._watchers.remove(self)
            except ValueError:
                pass
        for dep in self.deps:
            dep.remove_subscriber(self)
        self.active = False

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"Watcher({self.expression}, {state})"
