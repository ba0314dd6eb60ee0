"""Shared fixtures: every test starts from pristine global state."""

from dataclasses import fields

import pytest

from vcore import Component, config


@pytest.fixture(autouse=True)
def _restore_globals():
    options = Component.options
    registries = {key: dict(options[key]) for key in ("components", "directives", "filters")}
    saved = {f.name: getattr(config, f.name) for f in fields(config)}
    strategies = dict(config.option_merge_strategies)
    yield
    Component.options = options
    for key, entries in registries.items():
        options[key].clear()
        options[key].update(entries)
    for name, value in saved.items():
        if name != "option_merge_strategies":
            setattr(config, name, value)
    config.option_merge_strategies.clear()
    config.option_merge_strategies.update(strategies)
    if "_installed_plugins" in Component.__dict__:
        del Component._installed_plugins


@pytest.fixture
def warnings():
    """Collect development warnings instead of logging them."""
    log = []
    config.warn_handler = lambda msg, vm, trace: log.append(msg)
    return log


@pytest.fixture
def errors():
    """Collect routed errors as (exception, vm, info) instead of raising them."""
    log = []
    config.error_handler = lambda err, vm, info: log.append((err, vm, info))
    return log
