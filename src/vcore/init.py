"""Instance initialization and configuration resolution.

init() runs the setup phases of one component instance in a fixed order.
resolve_constructor_options() returns a component type's effective options,
re-merging against its ancestor only when the ancestor's resolved options
object has been replaced (Component.mixin, a remerge further up the chain).
"""

from __future__ import annotations

import itertools
import logging
import time
from collections import ChainMap
from typing import Any

from vcore.config import config
from vcore.debug import format_component_name
from vcore.events import init_events
from vcore.inject import init_injections, init_provide
from vcore.lifecycle import call_hook, init_lifecycle
from vcore.options import merge_options
from vcore.render import init_render
from vcore.state import init_state

logger = logging.getLogger("vcore.init")

_uid = itertools.count()


def init(vm, options: dict | None = None) -> None:
    """Initialize a component instance.

    The order of the phases between before_create and created is fixed:
    injections resolve before state so data and computed can read them, and
    provide runs after state so provided values can derive from it.
    """
    vm.uid = next(_uid)

    start = time.perf_counter() if config.performance else None

    if options and options.get("_is_component"):
        # Options from a parent's render pass need no inheritance resolution,
        # only a direct copy of the fields it supplies.
        init_internal_component(vm, options)
    else:
        vm.options = merge_options(resolve_constructor_options(type(vm)), options or {}, vm)

    vm._self = vm
    init_lifecycle(vm)
    init_events(vm)
    init_render(vm)
    call_hook(vm, "before_create")
    init_injections(vm)
    init_state(vm)
    init_provide(vm)
    call_hook(vm, "created")

    if start is not None:
        logger.debug(
            "%s init took %.3fms",
            format_component_name(vm, False),
            (time.perf_counter() - start) * 1000,
        )

    if vm.options.get("el") is not None:
        vm.mount(vm.options["el"])


def init_internal_component(vm, options: dict) -> None:
    opts = vm.options = ChainMap({}, type(vm).options)
    parent_vnode = options["_parent_vnode"]
    opts["parent"] = options.get("parent")
    opts["_parent_vnode"] = parent_vnode

    vnode_component_options = parent_vnode.component_options
    opts["props_data"] = vnode_component_options.props_data
    opts["_parent_listeners"] = vnode_component_options.listeners
    opts["_render_children"] = vnode_component_options.children
    opts["_component_tag"] = vnode_component_options.tag

    if options.get("render") is not None:
        opts["render"] = options["render"]
        opts["static_render_fns"] = options.get("static_render_fns")


def resolve_constructor_options(ctor: type) -> dict:
    """Effective options of ctor, resolved against its ancestor chain.

    Returns the same object on every call until an ancestor's resolved
    options are replaced.
    """
    options = ctor.options
    if ctor.super_type is None:
        return options
    super_options = resolve_constructor_options(ctor.super_type)
    if super_options is ctor.super_options:
        return options

    ctor.super_options = super_options
    # Options attached to ctor after it was sealed (a mixin applied to the
    # subclass itself, a plugin) survive the remerge.
    modified = resolve_modified_options(ctor)
    if modified:
        ctor.extend_options.update(modified)
    options = ctor.options = merge_options(super_options, ctor.extend_options)
    if options.get("name"):
        options["components"][options["name"]] = ctor
    ctor.sealed_options = dict(options)
    logger.debug("re-resolved options for %s", ctor.__name__)
    return options


def resolve_modified_options(ctor: type) -> dict | None:
    """Entries of ctor.options replaced since the options were last sealed."""
    modified = None
    latest = ctor.options
    extended = ctor.extend_options
    sealed = ctor.sealed_options
    for key, value in latest.items():
        if value is not sealed.get(key):
            if modified is None:
                modified = {}
            modified[key] = dedupe(value, extended.get(key), sealed.get(key))
    return modified


def _contains(items: list, item: Any) -> bool:
    return any(item is existing for existing in items)


def dedupe(latest: Any, extended: Any, sealed: Any) -> Any:
    """Drop list entries that came from the last merge rather than the declaration.

    An entry is kept if it was declared (in extended) or is new since the
    last seal; entries only present because they were merged in before are
    dropped so the next merge does not add them twice.
    """
    if not isinstance(latest, list):
        return latest
    sealed = sealed if isinstance(sealed, list) else [sealed]
    extended = extended if isinstance(extended, list) else [extended]
    return [
        item for item in latest if _contains(extended, item) or not _contains(sealed, item)
    ]
