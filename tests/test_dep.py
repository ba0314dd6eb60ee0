"""Tests for Dep — subscription and notification."""

from vcore import Dep, reading


class _Sub:
    """Minimal subscriber recording its update() calls."""

    def __init__(self, name, log, on_update=None):
        self.name = name
        self.log = log
        self.on_update = on_update

    def update(self):
        self.log.append(self.name)
        if self.on_update is not None:
            self.on_update()


class _Reader:
    def __init__(self):
        self.deps = []

    def add_dependency(self, dep):
        self.deps.append(dep)


class TestDep:
    def test_ids_increase(self):
        a, b = Dep(), Dep()
        assert b.id > a.id

    def test_notify_in_insertion_order_once_each(self):
        dep = Dep()
        log = []
        for name in ("a", "b", "c"):
            dep.add_subscriber(_Sub(name, log))
        dep.notify()
        assert log == ["a", "b", "c"]

    def test_snapshot_isolation(self):
        """A subscriber added during notify() waits for the next notify()."""
        dep = Dep()
        log = []
        added = []

        def add_d():
            if not added:
                added.append(True)
                dep.add_subscriber(_Sub("d", log))

        dep.add_subscriber(_Sub("a", log, add_d))
        dep.add_subscriber(_Sub("b", log))
        dep.add_subscriber(_Sub("c", log))

        dep.notify()
        assert log == ["a", "b", "c"]

        dep.notify()
        assert log == ["a", "b", "c", "a", "b", "c", "d"]

    def test_removal_during_notify_still_reaches_snapshot(self):
        dep = Dep()
        log = []
        c = _Sub("c", log)
        dep.add_subscriber(_Sub("a", log, lambda: dep.remove_subscriber(c)))
        dep.add_subscriber(c)
        dep.notify()
        assert log == ["a", "c"]
        assert dep.subs[1:] == []

    def test_no_dedup(self):
        dep = Dep()
        log = []
        sub = _Sub("a", log)
        dep.add_subscriber(sub)
        dep.add_subscriber(sub)
        dep.notify()
        assert log == ["a", "a"]

    def test_remove_first_occurrence(self):
        dep = Dep()
        sub = _Sub("a", [])
        other = _Sub("b", [])
        dep.add_subscriber(sub)
        dep.add_subscriber(other)
        dep.add_subscriber(sub)
        dep.remove_subscriber(sub)
        assert dep.subs == [other, sub]

    def test_remove_absent_is_noop(self):
        dep = Dep()
        dep.remove_subscriber(_Sub("ghost", []))  # no error
        assert dep.subs == []

    def test_register_without_reader_is_noop(self):
        dep = Dep()
        dep.register_dependency()
        assert dep.subs == []

    def test_register_delegates_to_reader(self):
        dep = Dep()
        reader = _Reader()
        with reading(reader):
            dep.register_dependency()
            dep.register_dependency()
        # Dedup is the reader's job.
        assert reader.deps == [dep, dep]
        assert dep.subs == []

    def test_register_with_null_reader_is_noop(self):
        dep = Dep()
        reader = _Reader()
        with reading(reader):
            with reading(None):
                dep.register_dependency()
        assert reader.deps == []
