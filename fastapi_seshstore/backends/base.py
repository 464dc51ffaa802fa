import abc
from collections.abc import Mapping
from typing import Any, ClassVar

from fastapi_seshstore.exceptions import MalformedToken, StoreError
from fastapi_seshstore.models import Session
from fastapi_seshstore.utils import dump_json, load_json


class SessionStore(abc.ABC):
    """
    Translates a session to an opaque token and back. The token is only
    meaningful to the store that produced it.

    ``load(await save(session)) == session`` must hold for every session whose
    values are JSON representable.
    """

    supports_expiry: ClassVar[bool] = False

    @abc.abstractmethod
    async def save(self, session: Mapping[str, Any]) -> str:
        """
        Persists `session` and returns the token to put in the cookie.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def load(self, token: str) -> Session | None:
        """
        Returns the session identified by `token`, or None when there is none.
        """
        raise NotImplementedError

    def serialize(self, session: Mapping[str, Any]) -> str:
        try:
            return dump_json(dict(session))
        except (TypeError, ValueError, RecursionError) as e:
            raise StoreError(f"Session data is not JSON serializable: {e}") from e

    def deserialize(self, raw: str | bytes, *, session_id: str | None = None) -> Session:
        try:
            data = load_json(raw)
        except (ValueError, RecursionError) as e:
            raise MalformedToken("Stored session is not valid JSON") from e

        if not isinstance(data, dict):
            raise MalformedToken("Stored session is not a JSON object")

        return Session(data, session_id=session_id)
