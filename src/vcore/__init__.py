"""vcore: reactive state tracking and component configuration for Python UI components."""

from importlib.metadata import version as _version

__version__ = _version("vcore")

from vcore._tracking import (
    clear_to_parent,
    get_current_reader,
    reading,
    set_current_reader,
    untracked,
)
from vcore.dep import Dep
from vcore.watcher import Watcher
from vcore.observable import (
    Observable,
    ReactiveDict,
    ReactiveList,
    observe,
    set_value,
    delete_value,
)
from vcore.config import Config, config
from vcore.component import Component
from vcore.init import resolve_constructor_options
from vcore.options import merge_options
from vcore.vnode import VNode, VNodeComponentOptions
# textual is not auto-imported: opt-in only

__all__ = [
    "Dep",
    "Watcher",
    "Observable",
    "ReactiveDict",
    "ReactiveList",
    "observe",
    "set_value",
    "delete_value",
    "Config",
    "config",
    "Component",
    "resolve_constructor_options",
    "merge_options",
    "VNode",
    "VNodeComponentOptions",
    "get_current_reader",
    "set_current_reader",
    "clear_to_parent",
    "reading",
    "untracked",
]
