"""Process-wide API installed on the Component base type once, at import.

- Component.config: the shared Config (replacing it is refused with a warning)
- Component.util: helpers for plugin authors (not a stable public API)
- Component.set / delete / observable
- Component.options: asset registries and the _base marker
- use, mixin, extend, component, directive, filter
"""

from __future__ import annotations

import itertools
import logging
import types
from collections.abc import Mapping
from types import SimpleNamespace

from vcore.config import Config, config
from vcore.debug import classify, warn
from vcore.keep_alive import KEEP_ALIVE
from vcore.observable import define_reactive, delete_value, observe, set_value
from vcore.options import ASSET_TYPES, merge_options, validate_component_name

logger = logging.getLogger("vcore.global_api")

_cid = itertools.count(1)

BUILTIN_COMPONENTS = {"keep-alive": KEEP_ALIVE}


class ComponentMeta(type):
    """Metaclass of Component; guards the shared config against replacement."""

    @property
    def config(cls) -> Config:
        return config

    @config.setter
    def config(cls, value) -> None:
        warn("Do not replace the Component.config object, set individual fields instead.")


def _extend_mapping(to: dict, frm: Mapping) -> dict:
    to.update(frm)
    return to


def init_global_api(component_type: type) -> None:
    # NOTE: util is not part of the public API; avoid relying on it unless
    # you accept that it may change.
    component_type.util = SimpleNamespace(
        warn=warn,
        extend=_extend_mapping,
        merge_options=merge_options,
        define_reactive=define_reactive,
    )

    component_type.set = staticmethod(set_value)
    component_type.delete = staticmethod(delete_value)
    component_type.observable = staticmethod(observe)

    component_type.options = {asset_type + "s": {} for asset_type in ASSET_TYPES}
    # The root type every plain options mapping is extended from.
    component_type.options["_base"] = component_type
    component_type.options["components"].update(BUILTIN_COMPONENTS)

    component_type.cid = 0
    component_type.super_type = None

    init_use(component_type)
    init_mixin(component_type)
    init_extend(component_type)
    init_asset_registers(component_type)


def init_use(component_type: type) -> None:
    def use(cls, plugin, *args):
        """Install a plugin once: plugin.install(cls, *args) or plugin(cls, *args)."""
        installed = cls.__dict__.get("_installed_plugins")
        if installed is None:
            installed = []
            cls._installed_plugins = installed
        if any(plugin is p for p in installed):
            return cls
        install = getattr(plugin, "install", None)
        if callable(install):
            install(cls, *args)
        elif callable(plugin):
            plugin(cls, *args)
        installed.append(plugin)
        logger.debug("installed plugin %r on %s", plugin, cls.__name__)
        return cls

    component_type.use = classmethod(use)


def init_mixin(component_type: type) -> None:
    def mixin(cls, mixin_options):
        """Merge options into this type; subclasses pick them up on next resolve."""
        cls.options = merge_options(cls.options, mixin_options)
        return cls

    component_type.mixin = classmethod(mixin)


def init_extend(component_type: type) -> None:
    def extend(cls, extend_options=None):
        """Create a subclass of this type with extend_options merged in."""
        extend_options = extend_options if extend_options is not None else {}
        name = extend_options.get("name") or cls.options.get("name")
        if name and extend_options.get("name"):
            validate_component_name(name)
        class_name = classify(name) if name else "VComponent"
        return types.new_class(class_name, (cls,), {"options": extend_options})

    component_type.extend = classmethod(extend)


def setup_subclass(sub: type, extend_options: dict) -> None:
    """Seal a new subclass: merge its declared options with its parent's."""
    super_type = next(base for base in sub.__bases__ if isinstance(base, ComponentMeta))
    sub.cid = next(_cid)
    sub.super_type = super_type
    sub.options = merge_options(super_type.options, extend_options)
    sub.super_options = super_type.options
    sub.extend_options = extend_options
    # Shallow copy: replaced entries are detected by identity at resolve time.
    sub.sealed_options = dict(sub.options)

    # Self-registration lets a component render itself recursively by name.
    name = sub.options.get("name")
    if name:
        sub.options["components"][name] = sub


def init_asset_registers(component_type: type) -> None:
    for asset_type in ASSET_TYPES:
        setattr(component_type, asset_type, classmethod(_make_asset_register(asset_type)))


def _make_asset_register(asset_type: str):
    def register(cls, id: str, definition=None):
        registry = cls.options[asset_type + "s"]
        if definition is None:
            return registry.get(id)
        if asset_type == "component":
            validate_component_name(id)
            if isinstance(definition, Mapping):
                definition.setdefault("name", id)
                definition = cls.options["_base"].extend(definition)
        elif asset_type == "directive" and callable(definition):
            definition = {"bind": definition, "update": definition}
        registry[id] = definition
        return definition

    register.__name__ = asset_type
    register.__doc__ = f"Register a global {asset_type} or, without a definition, look one up."
    return register
