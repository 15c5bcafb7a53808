"""Collector package for aztopology.

Provides the resource fetchers that supply the flat inventory the topology
graph is built from.

Submodules
----------
fetcher         -- ResourceFetcher protocol, JsonFileFetcher (offline inventory).
resource_graph  -- AzureResourceGraphFetcher: paged KQL query across subscriptions.
"""

from aztopology.collector.fetcher import JsonFileFetcher, ResourceFetcher
from aztopology.collector.resource_graph import AzureResourceGraphFetcher

__all__ = [
    "AzureResourceGraphFetcher",
    "JsonFileFetcher",
    "ResourceFetcher",
]
