"""Domain service functions for the Mini Social API."""

from . import counters, feed, graph, users

__all__ = [
    "counters",
    "feed",
    "graph",
    "users",
]
