"""Services package.

Keep this module lightweight: importing `services` must not import the
ledger core, which itself depends on the event bus.
"""

from __future__ import annotations

import importlib

from .event_bus import EventBus, Events, event_bus
from .logger import get_logger, setup_logging

__all__ = ["EventBus", "Events", "event_bus", "get_logger", "setup_logging"]


_LAZY_EXPORTS = {
    "LedgerAuditor": ("parimutuel.services.ledger_auditor", "LedgerAuditor"),
}


def __getattr__(name: str):
    if name in _LAZY_EXPORTS:
        module_name, attr = _LAZY_EXPORTS[name]
        module = importlib.import_module(module_name)
        value = getattr(module, attr)
        globals()[name] = value
        if name not in __all__:
            __all__.append(name)
        return value
    raise AttributeError(f"module 'parimutuel.services' has no attribute {name!r}")
