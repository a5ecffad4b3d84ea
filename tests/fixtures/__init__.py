"""Shared pytest fixtures and helpers."""

from .core import *  # noqa: F401,F403
from .storefront import *  # noqa: F401,F403
