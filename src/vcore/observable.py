"""Observable containers — state that registers its readers.

Each reactive slot owns a Dep. Reading a slot inside a watcher evaluation
registers the dependency; writing it notifies the dep's subscribers.

- Observable: a single value slot.
- ReactiveDict: one dep per key plus a dep for the key set (additions,
  deletions, iteration).
- ReactiveList: one dep for the whole list.

observe() converts plain dicts and lists (recursively) into these containers.
"""

from __future__ import annotations

from collections.abc import MutableMapping, MutableSequence
from typing import Any, Generic, Iterable, Iterator, TypeVar

from vcore.dep import Dep
from vcore.debug import warn

T = TypeVar("T")
KT = TypeVar("KT")
VT = TypeVar("VT")

_SCALARS = (str, bytes, int, float, complex, bool, type(None))


def same_value(old: Any, new: Any) -> bool:
    """Whether writing new over old is a no-op.

    Containers compare by identity only, so equal-but-distinct containers
    still notify (and comparing them never triggers tracking).
    """
    if old is new:
        return True
    if isinstance(old, _SCALARS) and isinstance(new, _SCALARS):
        if old != old and new != new:  # NaN
            return True
        return type(old) is type(new) and old == new
    return False


def is_reactive(value: Any) -> bool:
    return isinstance(value, (ReactiveDict, ReactiveList))


def observe(value: Any) -> Any:
    """Return a reactive version of a plain dict or list; other values unchanged."""
    if is_reactive(value):
        return value
    if type(value) is dict:
        return ReactiveDict(value)
    if type(value) is list:
        return ReactiveList(value)
    return value


def _depend_child(value: Any) -> None:
    # Reading a container through its parent slot also subscribes to the
    # container's own dep, so set_value()/delete_value() on it reach us.
    if is_reactive(value):
        value.dep.register_dependency()


class Observable(Generic[T]):
    """A single observable value."""

    __slots__ = ("_value", "dep")

    def __init__(self, value: T) -> None:
        self._value = value
        self.dep = Dep()

    def get(self) -> T:
        """Read the value. Inside a watcher evaluation, registers the dependency."""
        self.dep.register_dependency()
        _depend_child(self._value)
        return self._value

    def set(self, value: T) -> None:
        if same_value(self._value, value):
            return
        self._value = value
        self.dep.notify()

    def peek(self) -> T:
        """Read without registering a dependency."""
        return self._value

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"


class ReactiveDict(MutableMapping, Generic[KT, VT]):
    """A dict whose keys are individually observable.

    Values are observed on assignment unless the dict is shallow.
    """

    __slots__ = ("_data", "_deps", "dep", "shallow", "vm_count")

    def __init__(self, data: dict[KT, VT] | None = None, *, shallow: bool = False) -> None:
        self._data: dict[KT, VT] = {}
        self._deps: dict[KT, Dep] = {}
        self.dep = Dep()
        self.shallow = shallow
        # Number of component instances using this dict as their root data.
        self.vm_count = 0
        for key, value in (data or {}).items():
            self.define(key, value)

    def define(self, key: KT, value: VT) -> None:
        """Install key as a reactive slot without notifying anyone."""
        self._data[key] = value if self.shallow else observe(value)
        self._deps.setdefault(key, Dep())

    def has_own(self, key: KT) -> bool:
        """Membership test that registers no dependency."""
        return key in self._data

    def raw(self) -> dict[KT, VT]:
        """The underlying dict. Reads through it are not tracked."""
        return self._data

    def dep_for(self, key: KT) -> Dep | None:
        return self._deps.get(key)

    # --- Read operations (track) ---

    def __getitem__(self, key: KT) -> VT:
        dep = self._deps.get(key)
        if dep is None:
            # Missing keys depend on the key set, so a later addition notifies.
            self.dep.register_dependency()
            raise KeyError(key)
        dep.register_dependency()
        value = self._data[key]
        _depend_child(value)
        return value

    def __contains__(self, key: object) -> bool:
        self.dep.register_dependency()
        return key in self._data

    def __iter__(self) -> Iterator[KT]:
        self.dep.register_dependency()
        return iter(list(self._data))

    def __len__(self) -> int:
        self.dep.register_dependency()
        return len(self._data)

    # --- Write operations (notify) ---

    def __setitem__(self, key: KT, value: VT) -> None:
        if key in self._data:
            if same_value(self._data[key], value):
                return
            self._data[key] = value if self.shallow else observe(value)
            self._deps[key].notify()
        else:
            self.define(key, value)
            self.dep.notify()

    def __delitem__(self, key: KT) -> None:
        del self._data[key]
        dep = self._deps.pop(key)
        # Key-set subscribers go first; re-run key readers subscribe to it.
        self.dep.notify()
        dep.notify()

    def __repr__(self) -> str:
        return f"ReactiveDict({self._data!r})"


class ReactiveList(MutableSequence, Generic[T]):
    """A list that tracks reads and notifies on mutation.

    Any read operation (iteration, indexing, len) registers a dependency.
    Any mutation (append, extend, __setitem__, etc.) notifies observers once.
    """

    __slots__ = ("_items", "dep")

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._items: list[T] = [observe(item) for item in items] if items else []
        self.dep = Dep()

    def raw(self) -> list[T]:
        return self._items

    def _track(self) -> None:
        self.dep.register_dependency()

    # --- Read operations (track) ---

    def __getitem__(self, index):
        self._track()
        value = self._items[index]
        if not isinstance(index, slice):
            _depend_child(value)
        return value

    def __len__(self) -> int:
        self._track()
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        self._track()
        return iter(list(self._items))

    def __contains__(self, item: object) -> bool:
        self._track()
        return item in self._items

    # --- Write operations (notify) ---

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            self._items[index] = [observe(v) for v in value]
        else:
            self._items[index] = observe(value)
        self.dep.notify()

    def __delitem__(self, index) -> None:
        del self._items[index]
        self.dep.notify()

    def insert(self, index: int, item: T) -> None:
        self._items.insert(index, observe(item))
        self.dep.notify()

    def append(self, item: T) -> None:
        self._items.append(observe(item))
        self.dep.notify()

    def extend(self, items: Iterable[T]) -> None:
        self._items.extend(observe(item) for item in items)
        self.dep.notify()

    def pop(self, index: int = -1) -> T:
        result = self._items.pop(index)
        self.dep.notify()
        return result

    def remove(self, item: T) -> None:
        self._items.remove(item)
        self.dep.notify()

    def clear(self) -> None:
        self._items.clear()
        self.dep.notify()

    def sort(self, *args, **kwargs) -> None:
        self._items.sort(*args, **kwargs)
        self.dep.notify()

    def reverse(self) -> None:
        self._items.reverse()
        self.dep.notify()

    def __repr__(self) -> str:
        return f"ReactiveList({self._items!r})"


def define_reactive(target: ReactiveDict, key: Any, value: Any) -> None:
    """Install key on target as a reactive slot (no notification)."""
    target.define(key, value)


def _is_instance_target(target: Any) -> bool:
    return getattr(type(target), "_is_component_type", False)


def set_value(target: Any, key: Any, value: Any) -> Any:
    """Set a key on a container, adding a reactive slot if it is new.

    Adding keys to a component instance or its root data at runtime is not
    supported; declare them in data instead.
    """
    if isinstance(target, ReactiveList):
        target[key] = value
        return value
    if _is_instance_target(target):
        d = target.__dict__
        for store in (d.get("_props"), d.get("_data")):
            if store is not None and store.has_own(key):
                setattr(target, key, value)
                return value
    if _is_instance_target(target) or (isinstance(target, ReactiveDict) and target.vm_count):
        if not (isinstance(target, ReactiveDict) and target.has_own(key)):
            warn(
                "Avoid adding reactive properties to a component instance or its root "
                "data at runtime - declare it upfront in the data option."
            )
            return value
    target[key] = value
    return value


def delete_value(target: Any, key: Any) -> None:
    """Delete a key, notifying subscribers when the container is reactive."""
    if isinstance(target, ReactiveList):
        del target[key]
        return
    if _is_instance_target(target) or (isinstance(target, ReactiveDict) and target.vm_count):
        warn(
            "Avoid deleting properties on a component instance or its root data "
            "- just set it to None."
        )
        return
    if isinstance(target, ReactiveDict):
        if target.has_own(key):
            del target[key]
        return
    if isinstance(target, dict):
        target.pop(key, None)
