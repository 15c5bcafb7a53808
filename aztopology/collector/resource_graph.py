"""Azure Resource Graph fetcher.

Runs one KQL query over every configured subscription and follows
``skip_token`` pagination until the result set is exhausted. Credentials come
from ``DefaultAzureCredential`` (environment, managed identity, Azure CLI, ...).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from aztopology.collector.fetcher import rows_to_resources
from aztopology.errors import FetchError
from aztopology.models.resources import RawResource

_log = structlog.get_logger(component="collector.resource_graph")

_MAX_PAGE_SIZE = 1000


def build_resource_query(subscription_ids: Sequence[str]) -> str:
    """KQL projecting the columns the graph needs, ordered by name."""
    quoted = ",".join(f"'{s}'" for s in subscription_ids)
    return (
        "resources\n"
        f"| where subscriptionId in~ ({quoted})\n"
        "| project id, type, name, subscriptionId, resourceGroup, location, tags, properties\n"
        "| order by name asc"
    )


class AzureResourceGraphFetcher:
    """Fetches the resource inventory through the async Resource Graph client.

    Args:
        client:     Optional pre-built ``azure.mgmt.resourcegraph.aio.ResourceGraphClient``.
                    Built lazily from ``DefaultAzureCredential`` when omitted.
        page_size:  Rows per request (``$top``), capped at the service maximum of 1000.
    """

    def __init__(self, client: Any = None, page_size: int = _MAX_PAGE_SIZE) -> None:
        self._client = client
        self._credential: Any = None
        self._page_size = max(1, min(page_size, _MAX_PAGE_SIZE))

    def _ensure_client(self) -> Any:
        if self._client is None:
            from azure.identity.aio import DefaultAzureCredential
            from azure.mgmt.resourcegraph.aio import ResourceGraphClient

            self._credential = DefaultAzureCredential()
            self._client = ResourceGraphClient(self._credential)
            _log.info("resource graph client initialised")
        return self._client

    async def fetch_all(self, subscription_ids: Sequence[str]) -> list[RawResource]:
        if not subscription_ids:
            return []

        from azure.core.exceptions import AzureError
        from azure.mgmt.resourcegraph.models import QueryRequest, QueryRequestOptions

        client = self._ensure_client()
        query = build_resource_query(subscription_ids)
        rows: list[Any] = []
        skip_token: str | None = None
        pages = 0
        try:
            while True:
                options = QueryRequestOptions(top=self._page_size, result_format="objectArray")
                if skip_token:
                    options.skip_token = skip_token
                request = QueryRequest(
                    subscriptions=list(subscription_ids),
                    query=query,
                    options=options,
                )
                response = await client.resources(request)
                pages += 1
                rows.extend(response.data or [])
                skip_token = getattr(response, "skip_token", None)
                if not skip_token:
                    break
        except AzureError as exc:
            _log.error("resource graph query failed", error=str(exc), pages=pages)
            raise FetchError(f"Azure Resource Graph query failed: {exc}") from exc

        _log.info("resource graph query complete", rows=len(rows), pages=pages)
        return rows_to_resources(rows)

    async def close(self) -> None:
        """Close the HTTP pipeline and credential created by this fetcher."""
        if self._client is not None:
            await self._client.close()
        if self._credential is not None:
            await self._credential.close()
