import asyncio
from collections.abc import Mapping
from typing import Any, ClassVar, NamedTuple

from fastapi_seshstore.backends.base import SessionStore
from fastapi_seshstore.models import Session, session_id_of
from fastapi_seshstore.utils import generate_session_id, utc_seconds


class _Entry(NamedTuple):
    value: str
    expires_at: float | None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryStore(SessionStore):
    """
    Keeps sessions in a process local table keyed by a random id.

    Sessions are lost on restart and are not shared between worker processes
    or server instances, so this is meant for development and single process
    deployments.

    Every save moves its entry to the end of the table, so the table stays
    ordered by last save (and therefore by expiry). Expired entries are evicted
    from the front on each save, and when `max_entries` is set the least
    recently saved entries are evicted once the table is full.
    """

    supports_expiry: ClassVar[bool] = True

    def __init__(
        self,
        *,
        expire_after: int = 0,
        key_length: int = 32,
        max_entries: int | None = None,
    ) -> None:
        if expire_after < 0:
            raise ValueError("MemoryStore: expire_after must be >= 0")

        if max_entries is not None and max_entries < 1:
            raise ValueError("MemoryStore: max_entries must be >= 1")

        self.expire_after: int = expire_after
        self.key_length: int = key_length
        self.max_entries: int | None = max_entries
        self._sessions: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return len(self._sessions)

    def _expires_at(self, now: float) -> float | None:
        if self.expire_after:
            return now + self.expire_after
        return None

    def _evict(self, now: float) -> None:
        # caller holds the lock
        stale = []
        for key, entry in self._sessions.items():
            if not entry.expired(now):
                break
            stale.append(key)

        for key in stale:
            del self._sessions[key]

        if self.max_entries is not None:
            overflow = len(self._sessions) - self.max_entries
            for key in list(self._sessions)[: max(overflow, 0)]:
                del self._sessions[key]

    async def save(self, session: Mapping[str, Any]) -> str:
        value = self.serialize(session)
        async with self._lock:
            now = utc_seconds()
            session_id = session_id_of(session)
            if session_id is None:
                session_id = generate_session_id(self.key_length)
                while session_id in self._sessions:
                    session_id = generate_session_id(self.key_length)

            self._sessions.pop(session_id, None)
            self._sessions[session_id] = _Entry(value, self._expires_at(now))
            self._evict(now)

        if isinstance(session, Session):
            session.session_id = session_id

        return session_id

    async def load(self, token: str) -> Session | None:
        async with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return None

            if entry.expired(utc_seconds()):
                del self._sessions[token]
                return None

        return self.deserialize(entry.value, session_id=token)

    async def purge(self) -> int:
        """
        Drops every expired entry and returns how many were removed.
        """
        now = utc_seconds()
        async with self._lock:
            stale = [key for key, entry in self._sessions.items() if entry.expired(now)]
            for key in stale:
                del self._sessions[key]

        return len(stale)

    async def clear(self) -> None:
        async with self._lock:
            self._sessions.clear()
