"""Master module - dynamic route aggregator for FastAPI."""

from importlib.metadata import entry_points
from typing import Callable, cast

from fastapi import APIRouter

from .common.schemas import ExportSettings

ROUTES_GROUP = "cl_image_fit.routes"

# Type alias for route factory functions loaded from entry points
RouteFactory = Callable[[ExportSettings], APIRouter]


def create_master_router(settings: ExportSettings | None = None) -> APIRouter:
    """Aggregate all plugin routes registered under the cl_image_fit.routes group.

    Args:
        settings: Export tunables handed to every plugin router

    Returns:
        Combined APIRouter with all plugin routes

    Raises:
        RuntimeError: If a plugin fails to load (missing dependency, etc.)

    Example:
        from fastapi import FastAPI
        from cl_image_fit.master import create_master_router

        app = FastAPI()
        app.include_router(create_master_router(), prefix="/api")
    """
    master = APIRouter()
    export_settings = settings or ExportSettings()

    for ep in entry_points(group=ROUTES_GROUP):
        try:
            create_router = cast(RouteFactory, ep.load())
            master.include_router(create_router(export_settings))
        except Exception as e:
            # Plugin dependency missing = exception (fail fast)
            raise RuntimeError(f"Failed to load plugin '{ep.name}': {e}") from e

    return master


def get_available_plugins() -> list[str]:
    """Names of the plugins registered as route entry points."""
    return [ep.name for ep in entry_points(group=ROUTES_GROUP)]
