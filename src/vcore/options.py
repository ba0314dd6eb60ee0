"""Option merging — how a component's declared options combine with its ancestor's.

merge_options(parent, child, vm) is used both when deriving a type
(Component.extend, mixin) and when instantiating one. Each option key has a
strategy; strategies live in config.option_merge_strategies so users can add
their own beside the built-ins.
"""

from __future__ import annotations

import re
from collections import ChainMap
from collections.abc import Mapping
from typing import Any, Callable

from vcore.config import config
from vcore.debug import classify, warn
from vcore.observable import ReactiveDict, set_value

ASSET_TYPES = ("component", "directive", "filter")

LIFECYCLE_HOOKS = (
    "before_create",
    "created",
    "before_mount",
    "mounted",
    "before_update",
    "updated",
    "before_destroy",
    "destroyed",
    "activated",
    "deactivated",
    "error_captured",
)

strats: dict[str, Callable] = config.option_merge_strategies

_component_name_re = re.compile(r"^[a-zA-Z][\w.-]*$")
_builtin_tags = {"slot", "component"}


def _call(value, vm):
    return value(vm) if callable(value) else value


# --- el / props_data ------------------------------------------------------


def _instance_only_strat(parent_val, child_val, vm=None, key=None):
    if vm is None:
        warn(
            f'option "{key}" can only be used during instance creation '
            "with the Component constructor."
        )
    return default_strat(parent_val, child_val)


strats["el"] = _instance_only_strat
strats["props_data"] = _instance_only_strat


# --- data / provide ---------------------------------------------------------


def merge_data(to: Any, frm: Any) -> Any:
    """Recursively merge frm into to; keys already in to win."""
    if not frm:
        return to
    raw_from = frm.raw() if isinstance(frm, ReactiveDict) else frm
    for key, from_val in raw_from.items():
        raw_to = to.raw() if isinstance(to, ReactiveDict) else to
        if key not in raw_to:
            set_value(to, key, from_val)
            continue
        to_val = raw_to[key]
        if (
            to_val is not from_val
            and isinstance(to_val, (dict, ReactiveDict))
            and isinstance(from_val, (dict, ReactiveDict))
        ):
            merge_data(to_val, from_val)
    return to


def merge_data_or_fn(parent_val, child_val, vm=None):
    if vm is None:
        # Merging types: both values should be functions.
        if not child_val:
            return parent_val
        if not parent_val:
            return child_val

        def merged_data_fn(vm):
            return merge_data(_call(child_val, vm), _call(parent_val, vm))

        return merged_data_fn

    def merged_instance_data_fn(_vm):
        instance_data = _call(child_val, vm)
        default_data = _call(parent_val, vm)
        if instance_data:
            return merge_data(instance_data, default_data)
        return default_data

    return merged_instance_data_fn


def _data_strat(parent_val, child_val, vm=None, key=None):
    if vm is None:
        if child_val is not None and not callable(child_val):
            warn(
                'The "data" option should be a function that returns a per-instance '
                "value in component definitions."
            )
            return parent_val
        return merge_data_or_fn(parent_val, child_val)
    return merge_data_or_fn(parent_val, child_val, vm)


strats["data"] = _data_strat


def _provide_strat(parent_val, child_val, vm=None, key=None):
    return merge_data_or_fn(parent_val, child_val, vm)


strats["provide"] = _provide_strat


# --- hooks ------------------------------------------------------------------


def _as_list(value) -> list:
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def dedupe_hooks(hooks: list) -> list:
    result = []
    for hook in hooks:
        if not any(hook is seen for seen in result):
            result.append(hook)
    return result


def merge_hook(parent_val, child_val, vm=None, key=None):
    """Parent hooks run first; a hook appearing twice keeps its first position."""
    if child_val is None:
        return parent_val
    hooks = _as_list(parent_val) + _as_list(child_val)
    return dedupe_hooks(hooks)


for _hook in LIFECYCLE_HOOKS:
    strats[_hook] = merge_hook


# --- assets -----------------------------------------------------------------


def merge_assets(parent_val, child_val, vm=None, key=None):
    """Child entries shadow the parent's; parent registrations stay visible."""
    child = {}
    if child_val:
        _assert_mapping(key, child_val, vm)
        if isinstance(child_val, Mapping):
            child.update(child_val)
    if parent_val is None:
        return child
    return ChainMap(child, parent_val)


for _asset in ASSET_TYPES:
    strats[_asset + "s"] = merge_assets


# --- watch ------------------------------------------------------------------


def _watch_strat(parent_val, child_val, vm=None, key=None):
    if not child_val:
        return parent_val
    _assert_mapping(key, child_val, vm)
    if not parent_val:
        return child_val
    ret = dict(parent_val)
    for name, child in child_val.items():
        parent = ret.get(name)
        if parent is not None:
            ret[name] = _as_list(parent) + _as_list(child)
        else:
            ret[name] = child if isinstance(child, list) else [child]
    return ret


strats["watch"] = _watch_strat


# --- props / methods / inject / computed --------------------------------------


def _extend_strat(parent_val, child_val, vm=None, key=None):
    if child_val and vm is not None:
        _assert_mapping(key, child_val, vm)
    if not parent_val:
        return child_val
    ret = dict(parent_val)
    if child_val:
        ret.update(child_val)
    return ret


for _key in ("props", "methods", "inject", "computed"):
    strats[_key] = _extend_strat


def default_strat(parent_val, child_val, vm=None, key=None):
    return parent_val if child_val is None else child_val


def _assert_mapping(name, value, vm):
    if not isinstance(value, Mapping):
        warn(
            f'Invalid value for option "{name}": expected a mapping, '
            f"but got {type(value).__name__}.",
            vm,
        )


# --- normalization ------------------------------------------------------------


def validate_component_name(name: str) -> None:
    if not _component_name_re.match(name):
        warn(
            f'Invalid component name: "{name}". Component names should start with '
            "a letter and contain only word characters, dots or hyphens."
        )
    if name.lower() in _builtin_tags or config.is_reserved_tag(name):
        warn(
            "Do not use built-in or reserved tags as component id: " + name
        )


def check_components(options: Mapping) -> None:
    for name in options.get("components") or {}:
        validate_component_name(name)


def normalize_props(options: dict, vm=None) -> None:
    """Turn the list and shorthand forms of props into {name: {"type": ...}}."""
    props = options.get("props")
    if not props:
        return
    result = {}
    if isinstance(props, (list, tuple)):
        for name in props:
            if isinstance(name, str):
                result[name.replace("-", "_")] = {"type": None}
            else:
                warn("props must be strings when using list syntax.")
    elif isinstance(props, Mapping):
        for name, value in props.items():
            result[name.replace("-", "_")] = (
                dict(value) if isinstance(value, Mapping) else {"type": value}
            )
    else:
        warn(
            'Invalid value for option "props": expected a list or mapping, '
            f"but got {type(props).__name__}.",
            vm,
        )
    options["props"] = result


def normalize_inject(options: dict, vm=None) -> None:
    inject = options.get("inject")
    if not inject:
        return
    normalized = {}
    if isinstance(inject, (list, tuple)):
        for key in inject:
            normalized[key] = {"from": key}
    elif isinstance(inject, Mapping):
        for key, value in inject.items():
            if isinstance(value, Mapping):
                normalized[key] = {"from": key, **value}
            else:
                normalized[key] = {"from": value}
    else:
        warn(
            'Invalid value for option "inject": expected a list or mapping, '
            f"but got {type(inject).__name__}.",
            vm,
        )
    options["inject"] = normalized


def normalize_directives(options: dict) -> None:
    dirs = options.get("directives")
    if not dirs:
        return
    for key, definition in list(dirs.items()):
        if callable(definition):
            dirs[key] = {"bind": definition, "update": definition}


def merge_options(parent: Mapping, child: Any, vm=None) -> dict:
    """Merge two option mappings into a new dict.

    child may also be a component type, in which case its resolved options
    are used. Raw (never merged) child options are normalized in place and
    their extends/mixins are folded into parent first; merged options are
    recognized by their _base entry.
    """
    if isinstance(child, type):
        child = child.options

    if not child.get("_base"):
        if not config.production:
            check_components(child)
        normalize_props(child, vm)
        normalize_inject(child, vm)
        normalize_directives(child)
        extends = child.get("extends")
        if extends:
            parent = merge_options(parent, extends, vm)
        for mixin in child.get("mixins") or ():
            parent = merge_options(parent, mixin, vm)

    options = {}
    for key in parent:
        _merge_field(options, key, parent, child, vm)
    for key in child:
        if key not in parent:
            _merge_field(options, key, parent, child, vm)
    return options


def _merge_field(options: dict, key: str, parent: Mapping, child: Mapping, vm) -> None:
    strat = strats.get(key, default_strat)
    options[key] = strat(parent.get(key), child.get(key), vm, key)


def resolve_asset(options: Mapping, asset_type: str, name: str, warn_missing: bool = False):
    """Look up a registered component/directive/filter by name.

    Tries the name as given, with underscores for hyphens, and in PascalCase.
    """
    if not isinstance(name, str):
        return None
    assets = options.get(asset_type) or {}
    for candidate in (name, name.replace("-", "_")):
        if candidate in assets:
            return assets[candidate]
    pascal = classify(name)
    if pascal in assets:
        return assets[pascal]
    if warn_missing:
        warn(f"Failed to resolve {asset_type[:-1]}: {name}")
    return None
