"""Tests for option merging — per-key strategies and normalization."""

from collections import ChainMap

from vcore import Component, config, merge_options
from vcore.options import dedupe_hooks, merge_hook, resolve_asset


def h1(vm):
    pass


def h2(vm):
    pass


class TestHooks:
    def test_parent_hooks_run_first(self):
        merged = merge_options({"created": [h1]}, {"created": h2})
        assert merged["created"] == [h1, h2]

    def test_duplicate_hook_keeps_first_position(self):
        assert merge_hook([h1, h2], [h1]) == [h1, h2]

    def test_absent_child_keeps_parent(self):
        parent = [h1]
        assert merge_hook(parent, None) is parent

    def test_dedupe_is_by_identity(self):
        class Same:
            def __eq__(self, other):
                return True

            __hash__ = object.__hash__

        a, b = Same(), Same()
        assert dedupe_hooks([a, b, a]) == [a, b]
        assert dedupe_hooks([a, b, a])[1] is b


class TestAssets:
    def test_child_shadows_parent_registry(self):
        parent = {"components": {"x": 1, "y": 1}}
        merged = merge_options(parent, {"components": {"y": 2}})
        assets = merged["components"]
        assert isinstance(assets, ChainMap)
        assert assets["x"] == 1
        assert assets["y"] == 2

    def test_writes_stay_local(self):
        parent = {"components": {"x": 1}}
        merged = merge_options(parent, {})
        merged["components"]["z"] = 3
        assert "z" not in parent["components"]

    def test_parent_registrations_stay_visible(self):
        parent = {"components": {}}
        merged = merge_options(parent, {})
        parent["components"]["late"] = 1
        assert merged["components"]["late"] == 1

    def test_non_mapping_warns(self, warnings):
        merge_options({}, {"components": ["x"]}, vm=None)
        assert any('Invalid value for option "components"' in msg for msg in warnings)


class TestData:
    def test_nested_data_merges_through_extend(self):
        Parent = Component.extend({"data": lambda vm: {"a": 1, "nested": {"x": 1}}})
        Child = Parent.extend({"data": lambda vm: {"b": 2, "nested": {"y": 2}}})
        vm = Child()
        assert vm.a == 1
        assert vm.b == 2
        assert dict(vm.nested.items()) == {"x": 1, "y": 2}

    def test_child_wins_on_conflict(self):
        Parent = Component.extend({"data": lambda vm: {"a": 1}})
        Child = Parent.extend({"data": lambda vm: {"a": 2}})
        assert Child().a == 2

    def test_instance_data_merges_with_type_data(self):
        Base = Component.extend({"data": lambda vm: {"a": 1}})
        vm = Base({"data": {"b": 2}})
        assert (vm.a, vm.b) == (1, 2)

    def test_plain_data_on_type_warns(self, warnings):
        Sub = Component.extend({"data": {"a": 1}})
        assert Sub.options.get("data") is None
        assert any('"data" option should be a function' in msg for msg in warnings)

    def test_provide_merges_like_data(self):
        Parent = Component.extend({"provide": lambda vm: {"a": 1}})
        Child = Parent.extend({"provide": {"b": 2}})
        vm = Child()
        assert vm._provided == {"a": 1, "b": 2}


class TestWatch:
    def test_same_key_concatenates(self):
        def f(vm, new, old):
            pass

        def g(vm, new, old):
            pass

        def h(vm, new, old):
            pass

        merged = merge_options({"watch": {"a": f}}, {"watch": {"a": g, "b": h}})
        assert merged["watch"] == {"a": [f, g], "b": [h]}

    def test_child_only(self):
        def f(vm, new, old):
            pass

        merged = merge_options({}, {"watch": {"a": f}})
        assert merged["watch"] == {"a": f}


class TestShallowMerge:
    def test_child_keys_win(self):
        parent = {"methods": {"a": h1, "b": h1}}
        merged = merge_options(parent, {"methods": {"b": h2}})
        assert merged["methods"] == {"a": h1, "b": h2}
        assert parent["methods"] == {"a": h1, "b": h1}

    def test_computed_merge(self):
        merged = merge_options({"computed": {"x": h1}}, {"computed": {"y": h2}})
        assert merged["computed"] == {"x": h1, "y": h2}

    def test_default_strategy(self):
        assert merge_options({"name": "a"}, {"name": "b"})["name"] == "b"
        assert merge_options({"name": "a"}, {})["name"] == "a"


class TestNormalization:
    def test_props_list(self):
        merged = merge_options({}, {"props": ["my-prop", "count"]})
        assert merged["props"] == {"my_prop": {"type": None}, "count": {"type": None}}

    def test_props_shorthand(self):
        merged = merge_options({}, {"props": {"count": int, "label": {"type": str, "default": ""}}})
        assert merged["props"] == {
            "count": {"type": int},
            "label": {"type": str, "default": ""},
        }

    def test_props_list_non_string_warns(self, warnings):
        merge_options({}, {"props": [1]})
        assert any("props must be strings" in msg for msg in warnings)

    def test_inject_forms(self):
        merged = merge_options({}, {"inject": ["foo"]})
        assert merged["inject"] == {"foo": {"from": "foo"}}

        merged = merge_options({}, {"inject": {"bar": "baz", "q": {"default": 1}}})
        assert merged["inject"] == {
            "bar": {"from": "baz"},
            "q": {"from": "q", "default": 1},
        }

    def test_function_directive(self):
        def focus(el, binding):
            pass

        merged = merge_options({}, {"directives": {"focus": focus}})
        assert merged["directives"]["focus"] == {"bind": focus, "update": focus}

    def test_invalid_component_name_warns(self, warnings):
        merge_options({}, {"components": {"1bad": {}}})
        assert any('Invalid component name: "1bad"' in msg for msg in warnings)

    def test_reserved_tag_warns(self, warnings):
        merge_options({}, {"components": {"slot": {}}})
        assert any("built-in or reserved tags" in msg for msg in warnings)

    def test_host_reserved_tag_warns(self, warnings):
        config.is_reserved_tag = lambda tag: tag == "div"
        merge_options({}, {"components": {"div": {}}})
        assert any("built-in or reserved tags" in msg for msg in warnings)


class TestMixinsAndExtends:
    def test_mixins_merge_before_own_options(self):
        merged = merge_options({}, {"mixins": [{"created": h1}], "created": h2})
        assert merged["created"] == [h1, h2]

    def test_extends_merges_before_mixins(self):
        merged = merge_options(
            {},
            {"extends": {"created": h1}, "mixins": [{"created": h2}]},
        )
        assert merged["created"] == [h1, h2]

    def test_extends_a_component_type(self):
        Base = Component.extend({"created": h1})
        merged = merge_options(Component.options, {"extends": Base, "created": h2})
        assert merged["created"] == [h1, h2]

    def test_component_type_as_child(self):
        Base = Component.extend({"created": h1})
        merged = merge_options({}, Base)
        assert merged["created"] == [h1]


class TestCustomStrategy:
    def test_user_strategy_is_used(self):
        config.option_merge_strategies["weight"] = (
            lambda parent, child, vm=None, key=None: (parent or 0) + (child or 0)
        )
        assert merge_options({"weight": 1}, {"weight": 2})["weight"] == 3

    def test_strategy_flows_through_extend(self):
        config.option_merge_strategies["tags"] = (
            lambda parent, child, vm=None, key=None: (parent or []) + (child or [])
        )
        Parent = Component.extend({"tags": ["a"]})
        Child = Parent.extend({"tags": ["b"]})
        assert Child.options["tags"] == ["a", "b"]


class TestInstanceOnlyOptions:
    def test_el_without_instance_warns(self, warnings):
        merge_options({}, {"el": "#app"})
        assert any('option "el" can only be used during instance creation' in m for m in warnings)

    def test_props_data_with_instance_is_quiet(self, warnings):
        merged = merge_options({}, {"props_data": {"a": 1}}, vm=object())
        assert merged["props_data"] == {"a": 1}
        assert warnings == []


class TestResolveAsset:
    def test_lookup_forms(self):
        a, b, c = object(), object(), object()
        options = {"components": {"my-button": a, "MyCard": b, "my_thing": c}}
        assert resolve_asset(options, "components", "my-button") is a
        assert resolve_asset(options, "components", "my-card") is b
        assert resolve_asset(options, "components", "my-thing") is c

    def test_missing(self, warnings):
        assert resolve_asset({"components": {}}, "components", "nope") is None
        assert warnings == []
        resolve_asset({"components": {}}, "components", "nope", warn_missing=True)
        assert any("Failed to resolve component: nope" in msg for msg in warnings)

    def test_non_string_id(self):
        assert resolve_asset({"components": {}}, "components", 5) is None

    def test_inherited_registry(self):
        Sub = Component.extend({})
        assert resolve_asset(Sub.options, "components", "keep-alive") is not None
