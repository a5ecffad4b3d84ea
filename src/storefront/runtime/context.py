"""Process-wide configuration with scoped overrides.

The active ``ConfigData`` lives in a ``ContextVar`` so tests and request
handlers can swap parts of it without touching global state::

    with with_context(ConfigData(store=StoreConfig(tax_rate=0.1))):
        assert get_config().store.tax_rate == 0.1
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from pathlib import Path

from pydantic import BaseModel

from src.storefront.runtime.config.config_data import ConfigData
from src.storefront.runtime.config.config_template import load_config


def config_path() -> Path:
    return Path(os.getenv("STOREFRONT_CONFIG", "config.yaml"))


_active_config: ContextVar[ConfigData] = ContextVar(
    "storefront_config", default=load_config(config_path())
)


def get_config() -> ConfigData:
    return _active_config.get()


def set_config(config: ConfigData) -> Token[ConfigData]:
    """Replace the whole configuration for the current context."""
    return _active_config.set(config)


def _overlay(base: BaseModel, override: BaseModel) -> BaseModel:
    """Copy ``base`` with the fields explicitly set on ``override`` applied.

    Nested sections are overlaid field by field, so
    ``StoreConfig(tax_rate=0.1)`` leaves the other store settings alone.
    """
    updates = {}
    for name in override.model_fields_set:
        value = getattr(override, name)
        current = getattr(base, name)
        if isinstance(value, BaseModel) and isinstance(current, BaseModel):
            updates[name] = _overlay(current, value)
        else:
            updates[name] = value
    return base.model_copy(update=updates)


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[ConfigData]:
    """Run a block with ``config_override`` layered over the current config."""
    if config_override is None:
        yield get_config()
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData or None, got {type(config_override).__name__}"
        )

    token = set_config(_overlay(get_config(), config_override))
    try:
        yield get_config()
    finally:
        _active_config.reset(token)
