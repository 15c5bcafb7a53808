"""Error taxonomy for the topology engine.

ResourceNotFoundError and FetchError surface to callers of the service;
RelationshipInferenceError is absorbed inside a graph build and never leaves it.
"""

from __future__ import annotations


class TopologyError(Exception):
    """Base class for all aztopology errors."""


class ResourceNotFoundError(TopologyError):
    """A resource id is absent from the current graph."""

    def __init__(self, resource_id: str, role: str = "Resource") -> None:
        super().__init__(f"{role} not found: {resource_id}")
        self.resource_id = resource_id
        self.role = role


class FetchError(TopologyError):
    """The resource fetcher failed (network, auth, quota, malformed payload)."""


class RelationshipInferenceError(TopologyError):
    """Relationship derivation failed for a single node."""

    def __init__(self, resource_id: str, cause: Exception) -> None:
        super().__init__(f"Relationship inference failed for {resource_id}: {cause}")
        self.resource_id = resource_id
        self.cause = cause
