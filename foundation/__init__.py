"""
Foundation - Controller Runtime for PySide6 Applications

Declarative controllers with container-managed lifecycle, navigation on
action success, nested views, a priority event bus and debounced listeners.
"""
from foundation.core import *  # noqa: F401,F403
from foundation.core import __all__ as _core_all
from foundation.core.logging import setup_logging

__version__ = "0.1.0"

__all__ = list(_core_all) + ["setup_logging"]
