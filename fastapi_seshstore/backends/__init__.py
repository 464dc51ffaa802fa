from typing import Any, Literal

from .base import SessionStore
from .cookie import CookieStore
from .memory import MemoryStore
from .redis import RemoteStore

StoreName = Literal["cookie", "memory", "remote"]

STORE_REGISTRY: dict[str, type[SessionStore]] = {
    "cookie": CookieStore,
    "memory": MemoryStore,
    "remote": RemoteStore,
}


def resolve_store(
    store: SessionStore | str,
    *,
    expire_after: int | None = None,
    **options: Any,
) -> SessionStore:
    """
    Returns `store` when it already is a store, otherwise instantiates the
    registered implementation named `store` with `options`. `expire_after` is
    only handed to stores that expire entries and never overrides an explicit
    `expire_after` in `options`.

    Raises
    ------
    ValueError
        _no store is registered under that name, or it does not accept `options`_
    """
    if isinstance(store, SessionStore):
        return store

    store_cls = STORE_REGISTRY.get(store)
    if store_cls is None:
        known = ", ".join(sorted(STORE_REGISTRY))
        raise ValueError(f"Unknown session store `{store}`, expected one of: {known}")

    if expire_after is not None and store_cls.supports_expiry:
        options.setdefault("expire_after", expire_after)

    try:
        return store_cls(**options)
    except TypeError as e:
        raise ValueError(f"Invalid options for session store `{store}`: {e}") from e


__all__ = [
    "SessionStore",
    "CookieStore",
    "MemoryStore",
    "RemoteStore",
    "StoreName",
    "STORE_REGISTRY",
    "resolve_store",
]
