from .backends import CookieStore, MemoryStore, RemoteStore, SessionStore, resolve_store
from .config import SessionConfig
from .dependencies import SessionDep, get_session
from .exceptions import (
    HttpSessionUnavailable,
    MalformedToken,
    PayloadTooLarge,
    SessionError,
    StoreError,
    TamperDetected,
)
from .middleware import SessionMiddleware
from .models import ConfigDiagnostic, Session, SessionValue
from .signatures import MAX_COOKIE_SIZE, SessionSigner, SignedCookieCodec

__all__ = [
    "SessionMiddleware",
    "SessionConfig",
    "Session",
    "SessionValue",
    "ConfigDiagnostic",
    "SessionStore",
    "CookieStore",
    "MemoryStore",
    "RemoteStore",
    "resolve_store",
    "SessionSigner",
    "SignedCookieCodec",
    "MAX_COOKIE_SIZE",
    "SessionDep",
    "get_session",
    "SessionError",
    "MalformedToken",
    "TamperDetected",
    "PayloadTooLarge",
    "StoreError",
    "HttpSessionUnavailable",
]
