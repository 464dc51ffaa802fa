import logging
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from fastapi_seshstore.backends import SessionStore
from fastapi_seshstore.config import SessionConfig
from fastapi_seshstore.exceptions import SessionError, StoreError
from fastapi_seshstore.models import ConfigDiagnostic, Session
from fastapi_seshstore.signatures import SessionSigner, SignedCookieCodec

logger = logging.getLogger(__name__)

_DIAGNOSTIC_LEVELS = {
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Attaches a session to every request as ``request.session`` and persists it
    through the configured store once the endpoint has produced a response.

    Whatever travels through the client is signed, a cookie that fails
    verification is ignored rather than rejected. Errors in the session layer
    never fail the request, the client just loses its session and the cause is
    logged. Sessions whose cookie would exceed 4kb are dropped.

    Accepts a `SessionConfig`, a bare secret string, or the config's fields as
    keyword options::

        app.add_middleware(SessionMiddleware, secret="...", store="memory")
    """

    def __init__(
        self,
        app: ASGIApp,
        config: SessionConfig | str | None = None,
        **options: Any,
    ) -> None:
        super().__init__(app)
        self.config: SessionConfig = SessionConfig.coerce(config, **options)
        self.store: SessionStore = self.config.session_store
        self.codec = SignedCookieCodec(SessionSigner(self.config.secret))
        self.diagnostics: list[ConfigDiagnostic] = self.config.validate_security()

        for diagnostic in self.diagnostics:
            logger.log(_DIAGNOSTIC_LEVELS[diagnostic.level], "%s", diagnostic.message)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if "session" in request.scope:
            # installed twice, the outer instance owns the session
            return await call_next(request)

        cookie = request.cookies.get(self.config.name)
        session: Session | None = None
        if cookie:
            try:
                session = await self.decode_cookie(cookie)
            except SessionError as e:
                self._report("decoding", e)

        request.scope["session"] = session if session is not None else Session()

        response = await call_next(request)

        session = request.scope.get("session")
        if not isinstance(session, Mapping):
            return response

        try:
            new_cookie = await self.encode_session(session)
        except SessionError as e:
            self._report("encoding", e)
            return response

        expires = self._expires()
        if new_cookie == cookie and expires is None:
            return response

        response.set_cookie(
            key=self.config.name,
            value=new_cookie,
            path=self.config.path,
            domain=self.config.domain,
            expires=expires,
            secure=self.config.secure,
            httponly=self.config.http_only,
            samesite=self.config.samesite,
        )
        return response

    async def encode_session(self, session: Mapping[str, Any]) -> str:
        """
        Stores `session` and returns the value for the session cookie that
        retrieves it again on the next request.

        Raises
        ------
        StoreError
            _the store could not persist the session_
        PayloadTooLarge
            _the cookie would exceed 4kb_
        """
        token = await self.store.save(session)
        return self.codec.encode(token)

    async def decode_cookie(self, cookie: str) -> Session | None:
        """
        Verifies `cookie` and loads the session it points to. Returns None when
        the cookie has been tampered with or is not a session cookie at all.

        Raises
        ------
        StoreError
            _the store could not be read_
        MalformedToken
            _the stored session could not be parsed_
        """
        token = self.codec.decode(cookie)
        if token is None:
            logger.warning(
                "Ignoring session cookie `%s` that failed signature verification",
                self.config.name,
            )
            return None

        return await self.store.load(token)

    def _expires(self) -> datetime | None:
        if self.config.expire_after > 0:
            return datetime.now(timezone.utc) + timedelta(seconds=self.config.expire_after)
        return None

    def _report(self, stage: str, error: SessionError) -> None:
        if isinstance(error, StoreError):
            logger.error("Error %s session data: %s", stage, error, exc_info=error)
        else:
            logger.warning("Error %s session data: %s", stage, error)
