"""Resource fetcher contract and the local JSON-file implementation."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

import structlog

from aztopology.errors import FetchError
from aztopology.models.resources import RawResource

_log = structlog.get_logger(component="collector.fetcher")


class ResourceFetcher(Protocol):
    """Async source of the flat resource inventory.

    Implementations return resources in a stable order (the graph keeps it)
    and raise FetchError on any failure; they never return partial results.
    """

    async def fetch_all(self, subscription_ids: Sequence[str]) -> list[RawResource]: ...


def rows_to_resources(rows: Sequence[Any]) -> list[RawResource]:
    """Convert provider rows into RawResource records.

    Raises:
        FetchError: a row is not an object or has no ``id``.
    """
    resources: list[RawResource] = []
    for position, row in enumerate(rows):
        if not isinstance(row, dict):
            raise FetchError(f"resource row {position} is not an object")
        try:
            resources.append(RawResource.from_row(row))
        except KeyError as exc:
            raise FetchError(f"resource row {position} is missing field {exc}") from exc
    return resources


class JsonFileFetcher:
    """Reads the inventory from a local JSON file instead of Azure.

    The file holds either a list of Resource Graph rows or an object with a
    ``data`` list, the shape ``az graph query -o json`` prints. Rows whose
    subscription is not requested are skipped; an empty request keeps all.

    Args:
        path: Location of the JSON document. Re-read on every fetch.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    async def fetch_all(self, subscription_ids: Sequence[str]) -> list[RawResource]:
        payload = await asyncio.to_thread(self._load)
        rows = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            raise FetchError(f"{self._path}: expected a list of resources")

        wanted = {s.lower() for s in subscription_ids}
        resources = [
            r for r in rows_to_resources(rows) if not wanted or r.subscription_id.lower() in wanted
        ]
        _log.debug("resources loaded from file", path=str(self._path), count=len(resources))
        return resources

    def _load(self) -> Any:
        try:
            with self._path.open(encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            raise FetchError(f"cannot read resources file {self._path}: {exc}") from exc

    async def close(self) -> None:
        return None
