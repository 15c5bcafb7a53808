"""Core data structures for aztopology."""

from aztopology.models.config import AzTopologyConfig
from aztopology.models.resources import RawResource

__all__ = [
    "AzTopologyConfig",
    "RawResource",
]
