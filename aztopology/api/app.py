"""FastAPI application factory for aztopology.

Usage::

    from aztopology.api.app import create_app

    app = create_app(service=service, config=config)

The factory is designed for use by both the production bootstrap
(``aztopology.app``) and unit tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from aztopology.api.routes import router
from aztopology.api.schemas import ErrorResponse
from aztopology.errors import FetchError, ResourceNotFoundError

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(service: Any, config: Any = None) -> FastAPI:
    """Create and configure the aztopology FastAPI application.

    Args:
        service: TopologyService instance.
        config:  AzTopologyConfig. Optional; kept on app.state for handlers.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from aztopology import __version__

    app = FastAPI(
        title="aztopology",
        summary="Azure resource topology graph API",
        version=__version__,
        description=(
            "Search, neighbour lookup, shortest path and export over an "
            "in-memory graph of Azure resources and their inferred relationships."
        ),
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.state.service = service
    app.state.config = config

    app.include_router(router, prefix=_API_PREFIX)

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Map Pydantic validation errors to our error envelope."""
        errors = exc.errors()
        detail = ""
        if errors:
            locs = errors[0].get("loc", ())
            field = str(locs[-1]) if locs else ""
            detail = f"{field}: {errors[0].get('msg', '')}" if field else str(errors[0].get("msg", ""))

        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_REQUEST", detail=detail).model_dump(),
        )

    @app.exception_handler(ResourceNotFoundError)
    async def not_found_handler(_request: Request, exc: ResourceNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="RESOURCE_NOT_FOUND", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(FetchError)
    async def fetch_error_handler(request: Request, exc: FetchError) -> JSONResponse:
        _log.warning("topology fetch failed", path=str(request.url.path), error=str(exc))
        return JSONResponse(
            status_code=502,
            content=ErrorResponse(error="FETCH_FAILED", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
