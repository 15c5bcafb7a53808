"""Pydantic response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from aztopology.graph.models import GraphNode


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class StatusResponse(BaseModel):
    """Cache state; never triggers a rebuild."""

    has_graph: bool
    built_at: datetime | None = None
    age_seconds: float | None = None
    ttl_seconds: float
    stale: bool
    rebuilding: bool
    build_count: int
    node_count: int
    edge_count: int
    last_error: str | None = None


class ResourceModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    name: str
    subscription_id: str = Field(alias="subscriptionId")
    resource_group: str = Field(alias="resourceGroup")
    location: str
    tags: dict[str, str] | None = None
    properties: Any = None

    @classmethod
    def from_node(cls, node: GraphNode) -> ResourceModel:
        return cls(
            id=node.id,
            type=node.type,
            name=node.name,
            subscription_id=node.subscription_id,
            resource_group=node.resource_group,
            location=node.location,
            tags=node.tags,
            properties=node.properties,
        )


class SearchResponse(BaseModel):
    query: str
    resource_type: str | None = None
    count: int
    resources: list[ResourceModel]


class NeighborsResponse(BaseModel):
    resource: ResourceModel
    neighbors: list[ResourceModel]


class PathResponse(BaseModel):
    found: bool
    hops: int
    path: list[ResourceModel]


class SummaryResponse(BaseModel):
    node_count: int
    edge_count: int
    resource_types: list[str]
    subscriptions: list[str]
    resource_groups: list[str]


class RefreshResponse(BaseModel):
    node_count: int
    edge_count: int
    built_at: datetime
