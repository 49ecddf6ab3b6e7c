"""
Cache module for the technicals engine.

Short-lived snapshot caching, in Redis when available.
"""

from technicals.services.cache.snapshot_cache import SnapshotCache, connect_redis

__all__ = [
    "SnapshotCache",
    "connect_redis",
]
