"""Command line interface for the one-wire temperature exporter."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# ``cli.app`` must keep resolving to the module, not the Typer instance, so
# that ``cli.app.ApiClient`` and friends stay patchable.

__all__ = []
