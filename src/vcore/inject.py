"""Provide / inject: values an ancestor offers to all of its descendants.

Injections are resolved before state so data and computed can use them;
provided values are published after state so they can derive from it.
"""

from __future__ import annotations

from vcore._tracking import untracked
from vcore.debug import warn
from vcore.observable import ReactiveDict


def init_injections(vm) -> None:
    result = resolve_inject(vm.options.get("inject"), vm)
    if result:
        # Injected values are not made deeply reactive; the provider owns them.
        vm._injected = ReactiveDict(result, shallow=True)


def init_provide(vm) -> None:
    provide = vm.options.get("provide")
    if provide is not None:
        with untracked():
            vm._provided = provide(vm) if callable(provide) else provide


def resolve_inject(inject: dict | None, vm) -> dict:
    if not inject:
        return {}
    result = {}
    with untracked():
        for key, entry in inject.items():
            provide_key = entry["from"]
            source = vm
            while source is not None:
                provided = source._provided
                if provided and provide_key in provided:
                    result[key] = provided[provide_key]
                    break
                source = source.parent
            else:
                if "default" in entry:
                    default = entry["default"]
                    result[key] = default(vm) if callable(default) else default
                else:
                    warn(f'Injection "{key}" not found', vm)
    return result
