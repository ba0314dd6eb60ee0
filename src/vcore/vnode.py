"""Placeholder nodes exchanged between a parent's render pass and its children.

The render tree itself belongs to the host platform; this module only fixes
the fields the instance initializer reads when a parent creates a child.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class VNodeComponentOptions:
    """What a parent's render pass supplies for one child component."""

    ctor: type | None = None
    props_data: dict[str, Any] | None = None
    listeners: dict[str, Any] | None = None
    children: list[VNode] | None = None
    tag: str | None = None


@dataclass(eq=False)
class VNode:
    tag: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    children: list[VNode] | None = None
    text: str | None = None
    # The component instance whose render pass created this node.
    context: Any = None
    component_options: VNodeComponentOptions | None = None
    component_instance: Any = None
    parent: VNode | None = None

    @property
    def is_whitespace(self) -> bool:
        return self.tag is None and (self.text is None or not self.text.strip())


def create_empty_vnode(text: str = "") -> VNode:
    return VNode(text=text)
