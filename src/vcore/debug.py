"""Development diagnostics: warnings and component naming."""

from __future__ import annotations

import logging
import re

from vcore.config import config

logger = logging.getLogger("vcore.debug")

_classify_re = re.compile(r"(?:^|[-_])(\w)")


def classify(name: str) -> str:
    """'my-button' -> 'MyButton'."""
    return _classify_re.sub(lambda m: m.group(1).upper(), name)


def format_component_name(vm, include_file: bool = True) -> str:
    if vm is None:
        return "<Anonymous>"
    if getattr(vm, "root", None) is vm:
        return "<Root>"
    options = getattr(vm, "options", None) or {}
    name = options.get("name") or options.get("_component_tag")
    file = options.get("__file") if include_file else None
    if not name and file:
        name = file.rsplit("/", 1)[-1].rsplit(".", 1)[0]
    label = f"<{classify(name)}>" if name else "<Anonymous>"
    return f"{label} at {file}" if file and include_file else label


def generate_component_trace(vm) -> str:
    """Describe where a warning came from, walking up the parent chain."""
    if vm is None:
        return ""
    tree = []
    current = vm
    while current is not None:
        tree.append(format_component_name(current))
        current = getattr(current, "parent", None)
    if len(tree) == 1:
        return f"\n\n(found in {tree[0]})"
    lines = "\n".join(
        f"{'---> ' if i == 0 else '     ' + '  ' * i}{name}" for i, name in enumerate(tree)
    )
    return f"\n\nfound in\n\n{lines}"


def warn(msg: str, vm=None) -> None:
    """Report a development warning. No-op in production."""
    if config.production:
        return
    trace = generate_component_trace(vm)
    if config.warn_handler is not None:
        config.warn_handler(msg, vm, trace)
    elif not config.silent:
        logger.warning("[vcore warn]: %s%s", msg, trace)


def tip(msg: str, vm=None) -> None:
    if config.production or config.silent:
        return
    logger.info("[vcore tip]: %s%s", msg, generate_component_trace(vm))
