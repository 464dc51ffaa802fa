from collections.abc import Mapping
from typing import Any, ClassVar

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from fastapi_seshstore.backends.base import SessionStore
from fastapi_seshstore.exceptions import StoreError
from fastapi_seshstore.models import Session, session_id_of
from fastapi_seshstore.utils import generate_session_id


class RemoteStore(SessionStore):
    """
    Keeps sessions in Redis keyed by a random id, the cookie only carries the id.

    When `expire_after` is greater than zero it is used as the key's TTL.
    Connection and command failures are raised as `StoreError`. A client built
    from `redis_url` belongs to the store and is closed by `aclose`.
    """

    supports_expiry: ClassVar[bool] = True

    def __init__(
        self,
        redis_client: aioredis.Redis | None = None,
        *,
        redis_url: str | None = None,
        prefix: str = "session:",
        expire_after: int = 0,
        key_length: int = 32,
    ) -> None:
        self._owns_client: bool = redis_client is None
        if redis_client is None:
            if redis_url is None:
                raise ValueError("RemoteStore: either redis_client or redis_url is required")
            redis_client = aioredis.from_url(redis_url)

        if expire_after < 0:
            raise ValueError("RemoteStore: expire_after must be >= 0")

        self._redis: aioredis.Redis = redis_client
        self.prefix: str = prefix
        self.expire_after: int = expire_after
        self.key_length: int = key_length

    def redis_key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    async def save(self, session: Mapping[str, Any]) -> str:
        value = self.serialize(session)
        session_id = session_id_of(session) or generate_session_id(self.key_length)

        try:
            await self._redis.set(
                self.redis_key(session_id),
                value,
                ex=(self.expire_after or None),
            )
        except (RedisError, OSError) as e:
            raise StoreError(f"Could not save session to Redis: {e}") from e

        if isinstance(session, Session):
            session.session_id = session_id

        return session_id

    async def load(self, token: str) -> Session | None:
        try:
            raw = await self._redis.get(self.redis_key(token))
        except (RedisError, OSError) as e:
            raise StoreError(f"Could not load session from Redis: {e}") from e

        if raw is None:
            return None

        return self.deserialize(raw, session_id=token)

    async def revoke(self, session_id: str) -> None:
        try:
            await self._redis.delete(self.redis_key(session_id))
        except (RedisError, OSError) as e:
            raise StoreError(f"Could not revoke session in Redis: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._redis.aclose()
