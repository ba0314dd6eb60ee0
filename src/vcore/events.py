"""Instance events: a per-instance event bus plus the listeners a parent attaches.

A parent passes listeners to a child through its placeholder node; the child
registers them on its own bus during initialization. Names prefixed with '~'
are registered as one-shot listeners.
"""

from __future__ import annotations

from typing import Callable

from vcore.errors import invoke_with_error_handling

_HOOK_PREFIX = "hook:"


def init_events(vm) -> None:
    vm._events = {}
    vm._has_hook_event = False
    listeners = vm.options.get("_parent_listeners")
    if listeners:
        update_component_listeners(vm, listeners)


def _normalize_event(name: str) -> tuple[str, bool]:
    once = name.startswith("~")
    return (name[1:] if once else name), once


def update_component_listeners(vm, listeners: dict, old_listeners: dict | None = None) -> None:
    """Diff parent listeners against the previous set and (un)register them."""
    old_listeners = old_listeners or {}
    for name, handler in listeners.items():
        event, once = _normalize_event(name)
        old = old_listeners.get(name)
        if handler is None:
            continue
        if old is None:
            if once:
                vm.once(event, handler)
            else:
                vm.on(event, handler)
        elif old is not handler:
            vm.off(event, old)
            vm.on(event, handler)
    for name, old in old_listeners.items():
        if name not in listeners:
            event, _ = _normalize_event(name)
            vm.off(event, old)


def on(vm, event: str | list[str], fn: Callable) -> None:
    if isinstance(event, (list, tuple)):
        for e in event:
            on(vm, e, fn)
        return
    vm._events.setdefault(event, []).append(fn)
    # Flags hook:event listeners so call_hook can skip the emit otherwise.
    if event.startswith(_HOOK_PREFIX):
        vm._has_hook_event = True


def once(vm, event: str, fn: Callable) -> None:
    def wrapper(*args):
        off(vm, event, wrapper)
        return fn(*args)

    wrapper.fn = fn
    on(vm, event, wrapper)


def off(vm, event: str | list[str] | None = None, fn: Callable | None = None) -> None:
    if event is None:
        vm._events = {}
        return
    if isinstance(event, (list, tuple)):
        for e in event:
            off(vm, e, fn)
        return
    handlers = vm._events.get(event)
    if not handlers:
        return
    if fn is None:
        vm._events[event] = []
        return
    for i in range(len(handlers) - 1, -1, -1):
        handler = handlers[i]
        if handler is fn or getattr(handler, "fn", None) is fn:
            del handlers[i]
            break


def emit(vm, event: str, *args) -> None:
    handlers = vm._events.get(event)
    if handlers:
        info = f'event handler for "{event}"'
        for handler in list(handlers):
            invoke_with_error_handling(handler, vm, args, info)
