"""Error routing for user code run by the framework.

Hooks, user watchers, event handlers and render functions are invoked through
here. An error first travels up the parent chain through error_captured hooks,
then reaches config.error_handler. With no handler configured it is logged and
re-raised; an error_captured hook that itself fails is only logged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from vcore._tracking import untracked
from vcore.config import config

logger = logging.getLogger("vcore.errors")


def handle_error(err: BaseException, vm, info: str) -> None:
    # Recording stays off so a failing render cannot subscribe an
    # error_captured hook's reads to the render watcher.
    with untracked():
        if vm is not None:
            current = vm
            while (current := getattr(current, "parent", None)) is not None:
                for hook in current.options.get("error_captured") or ():
                    try:
                        if hook(current, err, vm, info) is False:
                            return
                    except Exception as hook_err:
                        global_handle_error(hook_err, current, "error_captured hook", reraise=False)
        global_handle_error(err, vm, info)


def global_handle_error(err: BaseException, vm, info: str, *, reraise: bool = True) -> None:
    if config.error_handler is not None:
        config.error_handler(err, vm, info)
        return
    logger.error("Error in %s: %r", info, err)
    if reraise:
        raise err


def invoke_with_error_handling(
    handler: Callable, vm, args: tuple, info: str
) -> Any:
    """Call handler(*args); route any exception through handle_error."""
    try:
        return handler(*args)
    except Exception as err:
        handle_error(err, vm, info)
        return None
