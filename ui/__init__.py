# ui/__init__.py
from __future__ import annotations
from importlib import import_module

__all__ = [
    "App",
    "OfficeState",
    "MatchState",
    "SquadState",
    "TransfersState",
    "TableState",
    "MessageState",
]

_HOMES = {
    "App": ".app",
    "OfficeState": ".state_office",
    "MatchState": ".state_match",
    "SquadState": ".state_squad",
    "TransfersState": ".state_transfers",
    "TableState": ".state_table",
    "MessageState": ".state_message",
}


def __getattr__(name: str):
    if name in _HOMES:
        return getattr(import_module(_HOMES[name], __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
