"""REST routes over the TopologyService.

Resource ids contain slashes, so they are passed as query parameters rather
than path segments.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from aztopology.api.schemas import (
    ErrorResponse,
    HealthResponse,
    NeighborsResponse,
    PathResponse,
    RefreshResponse,
    ResourceModel,
    SearchResponse,
    StatusResponse,
    SummaryResponse,
)
from aztopology.graph.queries import TopologySummary
from aztopology.service import ExportFormat, TopologyService

router = APIRouter()

_MAX_PARAM_LENGTH = 2048

ResourceIdParam = Annotated[str, Query(min_length=1, max_length=_MAX_PARAM_LENGTH)]


def _service(request: Request) -> TopologyService:
    return request.app.state.service  # type: ignore[no-any-return]


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    from aztopology import __version__

    return HealthResponse(version=__version__)


@router.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    state = _service(request).status()
    return StatusResponse(
        has_graph=state.has_graph,
        built_at=state.built_at,
        age_seconds=state.age_seconds,
        ttl_seconds=state.ttl_seconds,
        stale=state.stale,
        rebuilding=state.rebuilding,
        build_count=state.build_count,
        node_count=state.node_count,
        edge_count=state.edge_count,
        last_error=state.last_error,
    )


@router.get("/resources/search", response_model=SearchResponse)
async def search_resources(
    request: Request,
    query: Annotated[str, Query(max_length=_MAX_PARAM_LENGTH)] = "",
    resource_type: Annotated[str | None, Query(max_length=_MAX_PARAM_LENGTH)] = None,
) -> SearchResponse:
    results = await _service(request).search(query, resource_type)
    return SearchResponse(
        query=query,
        resource_type=resource_type,
        count=len(results),
        resources=[ResourceModel.from_node(n) for n in results],
    )


@router.get("/resources/item", response_model=ResourceModel)
async def get_resource(request: Request, resource_id: ResourceIdParam) -> ResourceModel:
    node = await _service(request).get_resource(resource_id)
    return ResourceModel.from_node(node)


@router.get("/resources/neighbors", response_model=NeighborsResponse)
async def get_neighbors(request: Request, resource_id: ResourceIdParam) -> NeighborsResponse:
    result = await _service(request).get_neighbors(resource_id)
    return NeighborsResponse(
        resource=ResourceModel.from_node(result.node),
        neighbors=[ResourceModel.from_node(n) for n in result.neighbors],
    )


@router.get("/path", response_model=PathResponse)
async def find_path(request: Request, source_id: ResourceIdParam, target_id: ResourceIdParam) -> PathResponse:
    path = await _service(request).find_path(source_id, target_id)
    return PathResponse(
        found=bool(path),
        hops=len(path),
        path=[ResourceModel.from_node(n) for n in path],
    )


@router.get("/topology", response_model=None)
async def export_topology(
    request: Request,
    format: Annotated[str, Query(max_length=32)] = ExportFormat.SUMMARY.value,
) -> JSONResponse | SummaryResponse:
    try:
        fmt = ExportFormat.parse(format)
    except ValueError as exc:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_REQUEST", detail=str(exc)).model_dump(),
        )

    export = await _service(request).export_topology(fmt)
    if isinstance(export, TopologySummary):
        return SummaryResponse(
            node_count=export.node_count,
            edge_count=export.edge_count,
            resource_types=export.resource_types,
            subscriptions=export.subscriptions,
            resource_groups=export.resource_groups,
        )
    return JSONResponse(content=jsonable_encoder(export))


@router.post("/topology/refresh", response_model=RefreshResponse)
async def refresh_topology(request: Request) -> RefreshResponse:
    result = await _service(request).refresh_topology()
    return RefreshResponse(node_count=result.node_count, edge_count=result.edge_count, built_at=result.built_at)
