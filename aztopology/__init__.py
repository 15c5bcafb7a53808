"""aztopology: in-memory topology graph of Azure resources."""

__version__ = "0.1.0"
