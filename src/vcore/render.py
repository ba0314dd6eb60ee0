"""Render preparation: slots, attrs and listeners handed down by the parent.

Producing output is the host platform's job; this module only wires the
inputs a render function reads and runs it with error handling.
"""

from __future__ import annotations

from vcore.errors import handle_error
from vcore.observable import Observable
from vcore.vnode import VNode, create_empty_vnode


def init_render(vm) -> None:
    vm._vnode = None
    vm._static_trees = None
    options = vm.options
    parent_vnode = vm.vnode = options.get("_parent_vnode")
    render_context = parent_vnode.context if parent_vnode is not None else None
    vm.slots = resolve_slots(options.get("_render_children"), render_context)
    vm.scoped_slots = {}

    parent_data = parent_vnode.data if parent_vnode is not None else {}
    # attrs and listeners are reactive so a child re-renders when the parent
    # passes different ones.
    vm._attrs = Observable(parent_data.get("attrs") or {})
    vm._listeners = Observable(options.get("_parent_listeners") or {})


def resolve_slots(children: list | None, context) -> dict[str, list]:
    """Group child nodes by slot name. Whitespace-only slots are dropped."""
    slots: dict[str, list] = {}
    if not children:
        return slots
    for child in children:
        data = child.data if isinstance(child, VNode) else None
        name = data.get("slot") if data else None
        # Named slots only count when the node was created in the parent's
        # render pass.
        if name is not None and child.context is context:
            slots.setdefault(name, []).append(child)
        else:
            slots.setdefault("default", []).append(child)
    for name in list(slots):
        if all(isinstance(node, VNode) and node.is_whitespace for node in slots[name]):
            del slots[name]
    return slots


def render(vm):
    """Run the render function; on error keep the previous output."""
    render_fn = vm.options.get("render")
    parent_vnode = vm.vnode
    try:
        vnode = render_fn(vm)
    except Exception as err:
        handle_error(err, vm, "render")
        vnode = vm._vnode
    if vnode is None:
        vnode = create_empty_vnode()
    if isinstance(vnode, VNode):
        vnode.parent = parent_vnode
    return vnode
