"""Tests for vcore.textual — Textual integration layer."""

import threading

import pytest
from textual.css.query import NoMatches

from vcore import Component
from vcore import textual as stx

Counter = Component.extend({"data": lambda vm: {"count": 1}})


class _Widget:
    def __init__(self):
        self.updates = []

    def update(self, value):
        self.updates.append(value)

    def set_text(self, value):
        self.updates.append(("text", value))


class _MockApp:
    """Minimal mock matching the Textual App interface stx needs."""

    def __init__(self, *, is_running=True, widgets=None):
        self.is_running = is_running
        self.widgets = widgets or {}
        self._call_from_thread_log = []

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)

    def query_one(self, selector):
        try:
            return self.widgets[selector]
        except KeyError:
            raise NoMatches(selector) from None


class TestWatch:
    def test_skips_when_not_running(self):
        app = _MockApp(is_running=False)
        vm = Counter()
        effects = []
        stx.watch(app, vm, "count", lambda new, old: effects.append(new))
        vm.count = 2
        assert effects == []

    def test_skips_during_pause(self):
        app = _MockApp()
        vm = Counter()
        effects = []
        stx.watch(app, vm, "count", lambda new, old: effects.append(new))
        with stx.pause(app):
            vm.count = 2
        assert effects == []

    def test_fires_when_safe(self):
        app = _MockApp()
        vm = Counter()
        effects = []
        stx.watch(app, vm, "count", lambda new, old: effects.append((new, old)))
        vm.count = 2
        assert effects == [(2, 1)]

    def test_immediate(self):
        app = _MockApp()
        vm = Counter()
        effects = []
        stx.watch(app, vm, "count", lambda new, old: effects.append((new, old)), immediate=True)
        assert effects == [(1, None)]

    def test_catches_nomatch(self):
        """NoMatches from widget queries are silently swallowed."""
        app = _MockApp()
        vm = Counter()

        def _raise_nomatch(new, old):
            raise NoMatches("StatusFooter")

        unwatch = stx.watch(app, vm, "count", _raise_nomatch)
        vm.count = 2
        unwatch()

    def test_propagates_real_errors(self):
        """Non-NoMatches exceptions propagate normally."""
        app = _MockApp()
        vm = Counter()

        def _raise_value_error(new, old):
            raise ValueError("boom")

        stx.watch(app, vm, "count", _raise_value_error)
        with pytest.raises(ValueError, match="boom"):
            vm.count = 2

    def test_unwatch_stops(self):
        app = _MockApp()
        vm = Counter()
        effects = []
        unwatch = stx.watch(app, vm, "count", lambda new, old: effects.append(new))
        vm.count = 2
        assert effects == [2]
        unwatch()
        vm.count = 3
        assert effects == [2]

    def test_thread_marshal(self):
        """Triggers from background thread use call_from_thread."""
        app = _MockApp()
        vm = Counter()
        effects = []
        stx.watch(app, vm, "count", lambda new, old: effects.append(new))

        def _bg():
            vm.count = 2

        t = threading.Thread(target=_bg)
        t.start()
        t.join()

        assert effects == [2]
        assert len(app._call_from_thread_log) >= 1


class TestAutorun:
    def test_skips_during_pause(self):
        app = _MockApp()
        vm = Counter()
        log = []

        stx.autorun(app, vm, lambda vm: log.append(vm.count))
        assert log == [1]

        with stx.pause(app):
            vm.count = 2
        assert log == [1]

    def test_catches_nomatch(self):
        """NoMatches from widget queries are silently swallowed."""
        app = _MockApp()
        vm = Counter()
        call_count = [0]

        def _fn(vm):
            call_count[0] += 1
            vm.count  # track dependency
            if call_count[0] > 1:
                raise NoMatches("Widget")

        stx.autorun(app, vm, _fn)
        assert call_count[0] == 1

        vm.count = 2
        assert call_count[0] == 2

    def test_fires_when_safe(self):
        app = _MockApp()
        vm = Counter()
        log = []
        stx.autorun(app, vm, lambda vm: log.append(vm.count))
        vm.count = 2
        assert log == [1, 2]

    def test_teardown(self):
        app = _MockApp()
        vm = Counter()
        log = []
        watcher = stx.autorun(app, vm, lambda vm: log.append(vm.count))
        watcher.teardown()
        vm.count = 2
        assert log == [1]


class TestBind:
    Label = Component.extend(
        {"data": lambda vm: {"count": 1}, "render": lambda vm: f"count={vm.count}"}
    )

    def test_pushes_render_output(self):
        widget = _Widget()
        app = _MockApp(widgets={"#label": widget})
        vm = self.Label()
        stx.bind(app, vm, "#label")
        assert widget.updates == ["count=1"]
        vm.count = 2
        assert widget.updates == ["count=1", "count=2"]

    def test_custom_method(self):
        widget = _Widget()
        app = _MockApp(widgets={"#label": widget})
        stx.bind(app, self.Label(), "#label", method="set_text")
        assert widget.updates == [("text", "count=1")]

    def test_missing_widget_is_ignored(self):
        app = _MockApp()
        vm = self.Label()
        stx.bind(app, vm, "#missing")
        vm.count = 2

    def test_unbind(self):
        widget = _Widget()
        app = _MockApp(widgets={"#label": widget})
        vm = self.Label()
        unbind = stx.bind(app, vm, "#label")
        unbind()
        vm.count = 2
        assert widget.updates == ["count=1"]


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert stx.is_safe(app)

        with pytest.raises(RuntimeError):
            with stx.pause(app):
                assert not stx.is_safe(app)
                raise RuntimeError("oops")

        assert stx.is_safe(app)

    def test_pause_does_not_mutate_app(self):
        """Pause state lives in the module, not on the app."""
        app = _MockApp()
        attrs_before = set(vars(app))
        with stx.pause(app):
            attrs_during = set(vars(app))
        attrs_after = set(vars(app))
        assert attrs_before == attrs_during, (
            f"pause() added attributes to app: {attrs_during - attrs_before}"
        )
        assert attrs_before == attrs_after

    def test_multiple_apps_independent(self):
        """Pausing one app does not affect another."""
        app_a = _MockApp()
        app_b = _MockApp()
        with stx.pause(app_a):
            assert not stx.is_safe(app_a)
            assert stx.is_safe(app_b)
