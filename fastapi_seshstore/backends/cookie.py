from collections.abc import Mapping
from typing import Any

from fastapi_seshstore.backends.base import SessionStore
from fastapi_seshstore.models import Session


class CookieStore(SessionStore):
    """
    Keeps the whole session inside the cookie, the token is the session's JSON
    encoding. There is no server side state, so everything has to fit in the
    4kb cookie limit.
    """

    async def save(self, session: Mapping[str, Any]) -> str:
        return self.serialize(session)

    async def load(self, token: str) -> Session | None:
        return self.deserialize(token)
