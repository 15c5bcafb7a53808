"""REST API layer for aztopology.

Exposes:
    create_app -- FastAPI application factory.
    build_app  -- Alias for create_app (used by aztopology.app bootstrap).
"""

from aztopology.api.app import create_app

build_app = create_app

__all__ = ["build_app", "create_app"]
