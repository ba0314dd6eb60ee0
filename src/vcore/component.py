"""Component — the base type every component derives from.

A component type carries its resolved options on the class (cls.options);
an instance carries its own merged options (vm.options). Props, data,
injected values and computed properties are reachable as instance
attributes:

    Counter = Component.extend({
        "name": "counter",
        "data": lambda vm: {"count": 0},
        "computed": {"doubled": lambda vm: vm.count * 2},
    })

    vm = Counter()
    vm.count = 3
    vm.doubled  # 6
"""

from __future__ import annotations

from typing import Any, Callable

from vcore import events, lifecycle, render, state
from vcore.debug import warn
from vcore.global_api import ComponentMeta, init_global_api, setup_subclass
from vcore.init import init


class Component(metaclass=ComponentMeta):
    """A component type. Derive with Component.extend(options) or
    ``class Foo(Component, options={...})``."""

    _is_component_type = True

    # Host platform hook: patch(el, old_vnode, new_vnode) -> el.
    patch: Callable | None = None

    _data = None
    _props = None
    _injected = None
    _computed_watchers = None
    _provided = None
    _has_hook_event = False

    def __init__(self, options: dict | None = None) -> None:
        init(self, options)

    def __init_subclass__(cls, options: dict | None = None, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        setup_subclass(cls, options if options is not None else {})

    # --- State proxy ----------------------------------------------------------

    def __getattr__(self, key: str) -> Any:
        # Only reached when normal lookup fails.
        if key.startswith("_"):
            raise AttributeError(key)
        d = self.__dict__
        for store in (d.get("_props"), d.get("_data"), d.get("_injected")):
            if store is not None and store.has_own(key):
                return store[key]
        watchers = d.get("_computed_watchers")
        if watchers and key in watchers:
            return state.computed_value(self, key)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {key!r}")

    def __setattr__(self, key: str, value: Any) -> None:
        if not key.startswith("_") and key not in state.INSTANCE_ATTRS:
            d = self.__dict__
            props = d.get("_props")
            if props is not None and props.has_own(key):
                if d.get("parent") is not None:
                    warn(
                        "Avoid mutating a prop directly since the value will be "
                        "overwritten whenever the parent component re-renders. "
                        f'Use a data or computed property based on the prop\'s value. Prop being mutated: "{key}"',
                        self,
                    )
                props[key] = value
                return
            data = d.get("_data")
            if data is not None and data.has_own(key):
                data[key] = value
                return
            injected = d.get("_injected")
            if injected is not None and injected.has_own(key):
                warn(
                    "Avoid mutating an injected value directly since the changes will be "
                    "overwritten whenever the provided component re-renders. "
                    f'injection being mutated: "{key}"',
                    self,
                )
                injected[key] = value
                return
            watchers = d.get("_computed_watchers")
            if watchers and key in watchers:
                setter = self._computed_setters.get(key)
                if setter is None:
                    warn(f'Computed property "{key}" was assigned to but it has no setter.', self)
                else:
                    setter(self, value)
                return
        object.__setattr__(self, key, value)

    # --- Instance API -----------------------------------------------------------

    @property
    def data(self):
        return self._data

    @property
    def props(self):
        return self._props

    @property
    def attrs(self) -> dict:
        return self._attrs.get()

    @property
    def listeners(self) -> dict:
        return self._listeners.get()

    def watch(self, expr_or_fn, cb, *, deep: bool = False, immediate: bool = False):
        """Watch a dotted path or a function of the instance. Returns an unwatch function."""
        return state.watch(self, expr_or_fn, cb, deep=deep, immediate=immediate)

    def on(self, event, fn: Callable) -> Component:
        events.on(self, event, fn)
        return self

    def once(self, event: str, fn: Callable) -> Component:
        events.once(self, event, fn)
        return self

    def off(self, event=None, fn: Callable | None = None) -> Component:
        events.off(self, event, fn)
        return self

    def emit(self, event: str, *args) -> Component:
        events.emit(self, event, *args)
        return self

    def mount(self, el=None) -> Component:
        return lifecycle.mount_component(self, el)

    def force_update(self) -> None:
        lifecycle.force_update(self)

    def destroy(self) -> None:
        lifecycle.destroy(self)

    def _render(self):
        return render.render(self)

    def _update(self, vnode) -> None:
        lifecycle.update(self, vnode)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} uid={self.__dict__.get('uid')}>"


init_global_api(Component)
