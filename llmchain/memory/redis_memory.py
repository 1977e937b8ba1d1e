"""Redis-backed memory store.

Entries of one pipeline live in a single Redis hash: the hash field is the
step name and the value is the entry serialized as JSON. The read/write
contract is the same as RamMemory, so a pipeline can switch stores without
changing behavior, while the trace outlives the process.

Environment Variables (via RedisConfig):
    REDIS_HOST: Redis server host (default: localhost)
    REDIS_PORT: Redis server port (default: 6379)
    REDIS_DB: Redis database number (default: 0)
    REDIS_PASSWORD: Redis password (default: None)
    REDIS_SOCKET_TIMEOUT: Socket timeout in seconds (default: 5)
    REDIS_SOCKET_CONNECT_TIMEOUT: Connection timeout in seconds (default: 5)
    LLMCHAIN_MEMORY_NAMESPACE: Hash key (default: llmchain:memory)

Usage:
    memory = RedisMemory.from_config(RedisConfig(), namespace="chat:42")
    pipeline = Pipeline(steps, memory=memory)
"""

import logging
import os
from typing import Any, Dict, Optional

import redis
from redis.exceptions import RedisError

from ..config import MEMORY_NAMESPACE, get_int
from .base import BaseMemory
from .serializer import deserialize_json, serialize_json

logger = logging.getLogger(__name__)


class RedisConfig:
    """Configuration for the Redis connection.

    Loads settings from environment variables with sensible defaults.
    """

    def __init__(self):
        """Initialize Redis configuration from environment variables."""
        self.host = os.getenv("REDIS_HOST", "localhost")
        self.port = get_int("REDIS_PORT", 6379)
        self.db = get_int("REDIS_DB", 0)
        self.password = os.getenv("REDIS_PASSWORD", None)
        self.socket_timeout = get_int("REDIS_SOCKET_TIMEOUT", 5)
        self.socket_connect_timeout = get_int("REDIS_SOCKET_CONNECT_TIMEOUT", 5)

    def __repr__(self) -> str:
        """String representation (safe - no password)."""
        return f"RedisConfig(host={self.host}, port={self.port}, db={self.db})"


class RedisMemory(BaseMemory):
    """
    Memory store persisted in a Redis hash.

    Redis failures are logged and re-raised: a write that silently fails
    would leave the trace incomplete.
    """

    def __init__(self, client: redis.Redis, namespace: str = MEMORY_NAMESPACE):
        """
        Args:
            client: Redis client created with decode_responses=True
            namespace: Hash key holding this store's entries
        """
        self.client = client
        self.namespace = namespace

    @classmethod
    def from_config(
        cls, config: Optional[RedisConfig] = None, namespace: str = MEMORY_NAMESPACE
    ) -> "RedisMemory":
        """Create a store with its own client from a RedisConfig."""
        config = config or RedisConfig()
        logger.info(f"Connecting Redis memory store: {config} namespace={namespace}")
        client = redis.Redis(
            host=config.host,
            port=config.port,
            db=config.db,
            password=config.password,
            socket_timeout=config.socket_timeout,
            socket_connect_timeout=config.socket_connect_timeout,
            decode_responses=True,  # Return strings instead of bytes
        )
        return cls(client, namespace=namespace)

    def put(self, key: str, value: Any) -> None:
        try:
            self.client.hset(self.namespace, key, serialize_json(value))
            logger.debug(f"Memory SET: {self.namespace}[{key}]")
        except RedisError as e:
            logger.error(f"Redis HSET failed for '{self.namespace}[{key}]': {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        try:
            raw = self.client.hget(self.namespace, key)
        except RedisError as e:
            logger.error(f"Redis HGET failed for '{self.namespace}[{key}]': {e}")
            raise

        if raw is None:
            logger.debug(f"Memory MISS: {self.namespace}[{key}]")
            return default
        return deserialize_json(raw)

    def has(self, key: str) -> bool:
        try:
            return bool(self.client.hexists(self.namespace, key))
        except RedisError as e:
            logger.error(f"Redis HEXISTS failed for '{self.namespace}[{key}]': {e}")
            raise

    def all(self) -> Dict[str, Any]:
        try:
            raw_entries = self.client.hgetall(self.namespace)
        except RedisError as e:
            logger.error(f"Redis HGETALL failed for '{self.namespace}': {e}")
            raise
        return {key: deserialize_json(raw) for key, raw in raw_entries.items()}

    def clear(self) -> None:
        """Delete every entry of this namespace. Never called during a run."""
        try:
            self.client.delete(self.namespace)
            logger.debug(f"Memory CLEAR: {self.namespace}")
        except RedisError as e:
            logger.error(f"Redis DELETE failed for '{self.namespace}': {e}")
            raise

    def ping(self) -> bool:
        """Check if the Redis server is reachable."""
        try:
            return bool(self.client.ping())
        except RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    def __repr__(self) -> str:
        return f"RedisMemory(namespace={self.namespace})"
