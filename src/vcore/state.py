"""Reactive instance state: props, methods, data, computed, watch.

This is where the dependency graph's leaves are created. Props and data
become ReactiveDicts (one Dep per key); computed values become lazy Watchers;
watch entries become user Watchers.
"""

from __future__ import annotations

import types
from collections.abc import Callable, Mapping
from typing import Any

from vcore._tracking import get_current_reader, untracked
from vcore.debug import warn
from vcore.errors import handle_error, invoke_with_error_handling
from vcore.observable import ReactiveDict, observe
from vcore.watcher import Watcher


def init_state(vm) -> None:
    vm._watchers = []
    options = vm.options
    if options.get("props"):
        init_props(vm, options["props"])
    if options.get("methods"):
        init_methods(vm, options["methods"])
    if options.get("data") is not None:
        init_data(vm)
    else:
        vm._data = ReactiveDict()
        vm._data.vm_count += 1
    if options.get("computed"):
        init_computed(vm, options["computed"])
    if options.get("watch"):
        init_watch(vm, options["watch"])


# Attributes the framework sets on every instance.
INSTANCE_ATTRS = frozenset(
    {
        "uid",
        "options",
        "parent",
        "root",
        "children",
        "refs",
        "el",
        "vnode",
        "slots",
        "scoped_slots",
    }
)


def is_reserved(vm, key: str) -> bool:
    """Keys that cannot be proxied onto the instance."""
    return key.startswith("_") or key in INSTANCE_ATTRS or hasattr(type(vm), key)


# --- props ------------------------------------------------------------------


def init_props(vm, props_options: Mapping) -> None:
    props_data = vm.options.get("props_data") or {}
    is_root = vm.parent is None
    props = {}
    for key, prop in props_options.items():
        if is_reserved(vm, key):
            warn(f'"{key}" is a reserved attribute and cannot be used as component prop.', vm)
        props[key] = validate_prop(key, prop, props_data, vm)
    # A child's prop values belong to the parent, which already made them
    # reactive; only a root observes its own.
    vm._props = ReactiveDict(props, shallow=not is_root)


def _prop_types(prop: Mapping) -> tuple:
    declared = prop.get("type")
    if declared is None:
        return ()
    if isinstance(declared, (list, tuple)):
        return tuple(declared)
    return (declared,)


def validate_prop(key: str, prop: Mapping, props_data: Mapping, vm=None) -> Any:
    absent = key not in props_data
    value = props_data.get(key)
    types_ = _prop_types(prop)
    if bool in types_ and absent and "default" not in prop:
        value = False
    elif value is None:
        value = observe(get_prop_default(vm, prop, key))
    assert_prop(prop, key, value, vm, absent)
    return value


def get_prop_default(vm, prop: Mapping, key: str) -> Any:
    if "default" not in prop:
        return None
    default = prop["default"]
    if isinstance(default, (dict, list)):
        warn(
            f'Invalid default value for prop "{key}": props with type dict/list '
            "must use a factory function to return the default value.",
            vm,
        )
    # A callable default is a factory, unless the prop itself holds callables.
    if callable(default) and Callable not in _prop_types(prop):
        return default(vm)
    return default


def assert_prop(prop: Mapping, key: str, value: Any, vm, absent: bool) -> None:
    if prop.get("required") and absent:
        warn(f'Missing required prop: "{key}"', vm)
        return
    if value is None and not prop.get("required"):
        return
    types_ = _prop_types(prop)
    if types_ and not isinstance(value, types_):
        expected = ", ".join(getattr(t, "__name__", repr(t)) for t in types_)
        warn(
            f'Invalid prop: type check failed for prop "{key}". '
            f"Expected {expected}, got {type(value).__name__} with value {value!r}.",
            vm,
        )
        return
    validator = prop.get("validator")
    if validator is not None and not validator(value):
        warn(f'Invalid prop: custom validator check failed for prop "{key}".', vm)


# --- methods ------------------------------------------------------------------


def init_methods(vm, methods: Mapping) -> None:
    props = vm.options.get("props") or {}
    for key, method in methods.items():
        if not callable(method):
            warn(
                f'Method "{key}" has type "{type(method).__name__}" in the component '
                "definition. Did you reference the function correctly?",
                vm,
            )
            continue
        if key in props:
            warn(f'Method "{key}" has already been defined as a prop.', vm)
        if is_reserved(vm, key):
            warn(
                f'Method "{key}" conflicts with an existing component attribute. '
                "Avoid names starting with _ or shadowing the instance API.",
                vm,
            )
            continue
        vm.__dict__[key] = types.MethodType(method, vm)


# --- data -------------------------------------------------------------------


def get_data(data: Callable, vm) -> Any:
    # No reader while data() runs: its reads must not become dependencies of
    # whichever watcher is creating this instance.
    with untracked():
        try:
            return data(vm)
        except Exception as err:
            handle_error(err, vm, "data()")
            return {}


def init_data(vm) -> None:
    data = vm.options.get("data")
    if callable(data):
        data = get_data(data, vm)
    if not isinstance(data, (dict, ReactiveDict)):
        warn("data functions should return a mapping.", vm)
        data = {}
    methods = vm.options.get("methods") or {}
    props = vm.options.get("props") or {}
    keys = data.raw() if isinstance(data, ReactiveDict) else data
    for key in keys:
        if key in methods:
            warn(f'Method "{key}" has already been defined as a data property.', vm)
        if key in props:
            warn(
                f'The data property "{key}" is already declared as a prop. '
                "Use prop default value instead.",
                vm,
            )
        elif is_reserved(vm, key):
            warn(f'Data property "{key}" is reserved and will not be proxied.', vm)
    vm._data = data if isinstance(data, ReactiveDict) else ReactiveDict(data)
    vm._data.vm_count += 1


# --- computed ---------------------------------------------------------------


def _noop(vm) -> None:
    return None


def init_computed(vm, computed: Mapping) -> None:
    watchers = vm._computed_watchers = {}
    setters = vm._computed_setters = {}
    for key, user_def in computed.items():
        if callable(user_def):
            getter, setter = user_def, None
        else:
            getter, setter = user_def.get("get"), user_def.get("set")
        if getter is None:
            warn(f'Getter is missing for computed property "{key}".', vm)
            getter = _noop
        if vm._data.has_own(key):
            warn(f'The computed property "{key}" is already defined in data.', vm)
        elif vm._props is not None and vm._props.has_own(key):
            warn(f'The computed property "{key}" is already defined as a prop.', vm)
        watchers[key] = Watcher(vm, getter, lazy=True)
        setters[key] = setter


def computed_value(vm, key: str) -> Any:
    """Read a computed property: recompute if dirty, pass its deps to the reader."""
    watcher = vm._computed_watchers[key]
    if watcher.dirty:
        watcher.evaluate()
    if get_current_reader() is not None:
        watcher.depend()
    return watcher.value


# --- watch ------------------------------------------------------------------


def init_watch(vm, watch: Mapping) -> None:
    for key, handler in watch.items():
        if isinstance(handler, list):
            for h in handler:
                create_watcher(vm, key, h)
        else:
            create_watcher(vm, key, handler)


def create_watcher(vm, expr_or_fn, handler, **options):
    """Watch with a function, a method name, or {"handler": ..., "deep": ..., "immediate": ...}."""
    if isinstance(handler, Mapping):
        options = {**handler, **options}
        handler = options.pop("handler")
    if isinstance(handler, str):
        handler = getattr(vm, handler)
    elif not isinstance(handler, types.MethodType):
        handler = types.MethodType(handler, vm)
    return watch(
        vm,
        expr_or_fn,
        handler,
        deep=options.get("deep", False),
        immediate=options.get("immediate", False),
    )


def watch(vm, expr_or_fn, cb, *, deep: bool = False, immediate: bool = False):
    """Watch an expression on vm; cb(new, old) runs on change. Returns an unwatch function."""
    if isinstance(cb, Mapping):
        return create_watcher(vm, expr_or_fn, cb)
    watcher = Watcher(vm, expr_or_fn, cb, deep=deep, user=True)
    if immediate:
        invoke_with_error_handling(
            cb, vm, (watcher.value, None), f'callback for immediate watcher "{watcher.expression}"'
        )
    return watcher.teardown
