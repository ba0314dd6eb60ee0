"""Instance lifecycle: parent/child linkage, hooks, mount, update, destroy."""

from __future__ import annotations

import logging

from vcore._tracking import untracked
from vcore.debug import warn
from vcore.errors import invoke_with_error_handling
from vcore.vnode import create_empty_vnode
from vcore.watcher import Watcher

logger = logging.getLogger("vcore.lifecycle")


def init_lifecycle(vm) -> None:
    options = vm.options

    # Abstract components (keep-alive) are skipped: the child attaches to the
    # first non-abstract ancestor.
    parent = options.get("parent")
    if parent is not None and not options.get("abstract"):
        while parent.options.get("abstract") and parent.parent is not None:
            parent = parent.parent
        parent.children.append(vm)

    vm.parent = parent
    vm.root = parent.root if parent is not None else vm
    vm.children = []
    vm.refs = {}

    vm._watcher = None
    vm._inactive = None
    vm._direct_inactive = False
    vm._is_mounted = False
    vm._is_destroyed = False
    vm._is_being_destroyed = False


def call_hook(vm, hook: str) -> None:
    """Run every handler registered for hook, in merge order.

    Dependency recording is off while hooks run, so state read in a hook is
    never attributed to the watcher that happened to trigger it.
    """
    with untracked():
        info = f"{hook} hook"
        for handler in vm.options.get(hook) or ():
            invoke_with_error_handling(handler, vm, (vm,), info)
        if vm._has_hook_event:
            vm.emit("hook:" + hook)


def mount_component(vm, el=None):
    vm.el = el
    if vm.options.get("render") is None:
        vm.options["render"] = lambda vm: create_empty_vnode()
        warn("Failed to mount component: render function not defined.", vm)
    call_hook(vm, "before_mount")

    def update_component(vm):
        vm._update(vm._render())

    def before():
        if vm._is_mounted and not vm._is_destroyed:
            call_hook(vm, "before_update")

    Watcher(vm, update_component, before=before, is_render_watcher=True)

    # Children created during the render pass mount themselves; only a root
    # (no placeholder node) is mounted here.
    if vm.vnode is None:
        vm._is_mounted = True
        call_hook(vm, "mounted")
    return vm


def update(vm, vnode) -> None:
    """Store the newest render output and hand it to the host platform."""
    prev_vnode = vm._vnode
    vm._vnode = vnode
    patch = type(vm).patch
    if patch is not None:
        vm.el = patch(vm.el, prev_vnode, vnode)
    if prev_vnode is not None and vm._is_mounted and not vm._is_destroyed:
        call_hook(vm, "updated")


def force_update(vm) -> None:
    if vm._watcher is not None:
        vm._watcher.update()


def destroy(vm) -> None:
    if vm._is_being_destroyed:
        return
    call_hook(vm, "before_destroy")
    vm._is_being_destroyed = True

    parent = vm.parent
    if parent is not None and not parent._is_being_destroyed and not vm.options.get("abstract"):
        try:
            parent.children.remove(vm)
        except ValueError:
            pass

    if vm._watcher is not None:
        vm._watcher.teardown()
    for watcher in list(vm._watchers):
        watcher.teardown()
    vm._watchers.clear()

    if vm._data is not None:
        vm._data.vm_count -= 1

    vm._is_destroyed = True
    update(vm, None)
    call_hook(vm, "destroyed")
    vm.off()
    logger.debug("destroyed component %d", vm.uid)
