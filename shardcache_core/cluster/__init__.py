"""Cluster module - Shard selection across backends."""

from shardcache_core.cluster.router import HASH_FUNCTIONS, ShardRouter

__all__ = ["ShardRouter", "HASH_FUNCTIONS"]
