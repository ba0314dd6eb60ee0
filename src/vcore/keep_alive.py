"""keep-alive: the built-in abstract component that caches child instances.

It renders its first component child and keeps that child's instance alive
when it is switched out, keyed by the child's key (or type and tag).
include/exclude restrict which component names are cached; max bounds the
cache, evicting the least recently rendered entry.
"""

from __future__ import annotations

import re

from vcore.observable import ReactiveList
from vcore.vnode import VNode


def _component_name(vnode: VNode) -> str | None:
    opts = vnode.component_options
    if opts is None:
        return None
    if opts.ctor is not None:
        name = opts.ctor.options.get("name")
        if name:
            return name
    return opts.tag


def matches(pattern, name: str) -> bool:
    if isinstance(pattern, (list, tuple, ReactiveList)):
        return name in pattern
    if isinstance(pattern, str):
        return name in pattern.split(",")
    if isinstance(pattern, re.Pattern):
        return pattern.search(name) is not None
    return False


def prune_cache(vm, keep) -> None:
    for key, cached in list(vm.cache.items()):
        name = _component_name(cached)
        if name and not keep(name):
            prune_cache_entry(vm.cache, key, vm.keys, vm._vnode)


def prune_cache_entry(cache: dict, key, keys: list, current: VNode | None = None) -> None:
    cached = cache.pop(key, None)
    if cached is not None and cached.component_instance is not None:
        if current is None or cached.tag != current.tag:
            cached.component_instance.destroy()
    if key in keys:
        keys.remove(key)


def _created(vm) -> None:
    vm.cache = {}
    vm.keys = []


def _destroyed(vm) -> None:
    for key in list(vm.cache):
        prune_cache_entry(vm.cache, key, vm.keys)


def _mounted(vm) -> None:
    vm.watch("include", lambda val, old: prune_cache(vm, lambda name: matches(val, name)))
    vm.watch("exclude", lambda val, old: prune_cache(vm, lambda name: not matches(val, name)))


def _render(vm):
    slot = vm.slots.get("default") or []
    vnode = next(
        (node for node in slot if isinstance(node, VNode) and node.component_options is not None),
        None,
    )
    if vnode is None:
        return slot[0] if slot else None

    name = _component_name(vnode)
    include, exclude = vm.include, vm.exclude
    if (include and (not name or not matches(include, name))) or (
        exclude and name and matches(exclude, name)
    ):
        return vnode

    opts = vnode.component_options
    key = vnode.data.get("key")
    if key is None:
        cid = opts.ctor.cid if opts.ctor is not None else ""
        key = f"{cid}::{opts.tag}" if opts.tag else str(cid)

    if key in vm.cache:
        vnode.component_instance = vm.cache[key].component_instance
        vm.keys.remove(key)
        vm.keys.append(key)
    else:
        vm.cache[key] = vnode
        vm.keys.append(key)
        if vm.max and len(vm.keys) > int(vm.max):
            prune_cache_entry(vm.cache, vm.keys[0], vm.keys, vm._vnode)

    vnode.data["keep_alive"] = True
    return vnode


KEEP_ALIVE = {
    "name": "keep-alive",
    "abstract": True,
    "props": {
        "include": {"type": (str, re.Pattern, list)},
        "exclude": {"type": (str, re.Pattern, list)},
        "max": {"type": (str, int)},
    },
    "created": _created,
    "destroyed": _destroyed,
    "mounted": _mounted,
    "render": _render,
}
