"""
Redis client helper with support for standalone, Sentinel and Cluster topologies.

Environment configuration (choose one):
- REDIS_URL (e.g. redis://localhost:6379/0)
- REDIS_SENTINELS (comma-separated like host1:26379,host2:26379)
  and REDIS_SENTINEL_MASTER (name of the master group)
- REDIS_CLUSTER_NODES (comma-separated like host1:7000,host2:7000)

The helper returns a synchronous redis.Redis or redis.cluster.RedisCluster
instance with decode_responses=True, shared by the whole process. redis-py
clients are thread-safe (connection pool), so concurrent pipeline
invocations share it without extra locking.
"""
from __future__ import annotations
import logging
import threading
from typing import List, Optional, Tuple

import redis
from redis.cluster import ClusterNode, RedisCluster
from redis.sentinel import Sentinel

from .. import config
from ..error_handling import ConfigurationError

logger = logging.getLogger("babycare.redis_client")

_redis_instance = None
_lock = threading.Lock()


def _parse_nodes(value: str, default_port: int) -> List[Tuple[str, int]]:
    nodes = []
    for n in value.split(","):
        n = n.strip()
        if not n:
            continue
        host, _, port = n.partition(":")
        try:
            nodes.append((host, int(port or default_port)))
        except ValueError:
            raise ConfigurationError(f"invalid redis node {n!r}") from None
    if not nodes:
        raise ConfigurationError(f"no redis nodes in {value!r}")
    return nodes


def create_redis(cfg: Optional[config.Config] = None):
    cfg = cfg or config.cfg

    # 1) Cluster
    if cfg.REDIS_CLUSTER_NODES:
        nodes = _parse_nodes(cfg.REDIS_CLUSTER_NODES, 7000)
        rc = RedisCluster(startup_nodes=[ClusterNode(h, p) for h, p in nodes], decode_responses=True)
        logger.info("Connected to Redis Cluster via nodes=%s", nodes)
        return rc

    # 2) Sentinel
    if cfg.REDIS_SENTINELS and cfg.REDIS_SENTINEL_MASTER:
        sentinel_hosts = _parse_nodes(cfg.REDIS_SENTINELS, 26379)
        sentinel = Sentinel(sentinel_hosts, decode_responses=True)
        master = sentinel.master_for(cfg.REDIS_SENTINEL_MASTER, decode_responses=True)
        logger.info("Connected to Redis Sentinel master=%s via %s", cfg.REDIS_SENTINEL_MASTER, sentinel_hosts)
        return master

    # 3) Single URL
    client = redis.Redis.from_url(cfg.REDIS_URL, decode_responses=True)
    logger.info("Connected to Redis via %s", cfg.REDIS_URL)
    return client


def get_redis(cfg: Optional[config.Config] = None):
    """
    Return the process-wide Redis client instance.
    """
    global _redis_instance
    if _redis_instance is not None:
        return _redis_instance
    with _lock:
        if _redis_instance is None:
            _redis_instance = create_redis(cfg)
    return _redis_instance
