"""Raw resource records as delivered by a resource fetcher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RawResource:
    """One row of the fetched resource inventory.

    Produced by the Resource Fetcher, consumed once by the graph build.
    ``properties`` is the provider's untyped document and is passed through
    unchanged.
    """

    id: str
    type: str
    name: str
    subscription_id: str
    resource_group: str
    location: str
    tags: dict[str, str] | None = None
    properties: Any = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> RawResource:
        """Build a RawResource from a Resource Graph row (camelCase columns).

        Raises:
            KeyError: the row has no ``id``.
        """
        tags = row.get("tags")
        return cls(
            id=str(row["id"]),
            type=str(row.get("type") or ""),
            name=str(row.get("name") or ""),
            subscription_id=str(row.get("subscriptionId") or ""),
            resource_group=str(row.get("resourceGroup") or ""),
            location=str(row.get("location") or ""),
            tags={str(k): "" if v is None else str(v) for k, v in tags.items()} if isinstance(tags, dict) else None,
            properties=row.get("properties"),
        )
