"""Process-wide configuration shared by every component.

There is exactly one Config instance. Set individual fields on it; replacing
it through Component.config is refused with a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass
class Config:
    # Merge strategy per option key. vcore.options installs the built-ins here,
    # so custom strategies registered by users sit beside them.
    option_merge_strategies: dict[str, Callable] = field(default_factory=dict)

    # Suppress warnings.
    silent: bool = False

    # Turn off development diagnostics (warnings, prop validation messages).
    production: bool = False

    # Log instance initialization time at DEBUG level.
    performance: bool = False

    # error_handler(err, vm, info) for errors raised in hooks, watchers,
    # event handlers and render functions.
    error_handler: Callable[[BaseException, Any, str], Any] | None = None

    # warn_handler(msg, vm, trace) replaces logging of warnings.
    warn_handler: Callable[[str, Any, str], Any] | None = None

    # Element names the host platform should not treat as components.
    ignored_elements: list[str] = field(default_factory=list)

    # Custom key aliases for key-modifier handling by the host platform.
    key_codes: dict[str, int | list[int]] = field(default_factory=dict)

    # Whether a tag is reserved by the host platform (so it cannot be a
    # component name).
    is_reserved_tag: Callable[[str], bool] = lambda tag: False


config = Config()
