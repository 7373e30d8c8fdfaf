import logging
from typing import Optional

import redis

from adrenaline.storage.base import StateStore

logger = logging.getLogger(__name__)


class RedisStore(StateStore):
    """
    Redis-backed snapshot store.
    The client is created lazily so constructing the store never touches the network.
    """

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self._client = client

    def get_client(self) -> redis.Redis:
        if not self._client:
            self._client = redis.from_url(self.redis_url, decode_responses=True)
        return self._client

    def load(self, key: str) -> Optional[str]:
        return self.get_client().get(key)

    def save(self, key: str, blob: str) -> None:
        self.get_client().set(key, blob)
