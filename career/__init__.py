# career/__init__.py
from __future__ import annotations
from importlib import import_module

__all__ = [
    "CareerEngine",
    "CareerSnapshot",
    "CareerState",
    "SaveStore",
    "Rules",
]

# Resolved lazily: the engine imports matchsim, which imports career submodules.
def __getattr__(name: str):
    if name in ("CareerEngine", "CareerSnapshot"):
        return getattr(import_module(".engine", __name__), name)
    if name == "CareerState":
        return import_module(".security", __name__).CareerState
    if name == "SaveStore":
        return import_module(".save", __name__).SaveStore
    if name == "Rules":
        return import_module(".config", __name__).Rules
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
