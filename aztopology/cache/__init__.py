"""Cache layer for aztopology.

Holds the single current topology graph and decides when it must be rebuilt.

Submodules:
    topology_cache  -- TTL cache with single-flight rebuild and explicit invalidation.
"""

from aztopology.cache.topology_cache import CacheState, TopologyCache

__all__ = ["CacheState", "TopologyCache"]
