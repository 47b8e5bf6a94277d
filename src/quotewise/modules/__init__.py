"""Feature modules.

Each subpackage with a ``routes`` module exposing ``router`` is mounted
under ``/api`` automatically.
"""

import pkgutil
from importlib import import_module

import structlog
from fastapi import APIRouter


logger = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Import every feature package's router, in name order."""
    routers: list[APIRouter] = []
    for info in sorted(pkgutil.iter_modules(__path__), key=lambda m: m.name):
        if not info.ispkg or info.name.startswith("_"):
            continue
        try:
            routes = import_module(f"{__name__}.{info.name}.routes")
        except ModuleNotFoundError as exc:
            if exc.name != f"{__name__}.{info.name}.routes":
                raise
            continue
        router = getattr(routes, "router", None)
        if isinstance(router, APIRouter):
            routers.append(router)
            logger.debug("module_loaded", module=info.name)
    return routers
