import logging
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from fastapi_seshstore import SessionDep, SessionMiddleware

SECRET = "test-secret-that-is-long-enough-0123456789"


def build_app(*, install: bool = True, **options: Any) -> FastAPI:
    """
    A small app exercising the session, wrapped in SessionMiddleware built
    from `options` when `install` is set.
    """
    app = FastAPI()

    @app.get("/session")
    async def read_session(request: Request) -> dict:
        return {"session": dict(request.session)}

    @app.post("/session/{key}/{value}")
    async def write_session(key: str, value: str, request: Request) -> dict:
        request.session[key] = value
        return {"session": dict(request.session)}

    @app.post("/big")
    async def big_session(request: Request) -> dict:
        request.session["blob"] = "x" * 5000
        return {"ok": True}

    @app.post("/drop")
    async def drop_session(request: Request) -> dict:
        request.scope["session"] = None
        return {"ok": True}

    @app.post("/replace")
    async def replace_session(request: Request) -> dict:
        request.scope["session"] = {"replaced": True}
        return {"ok": True}

    @app.get("/boom")
    async def boom(request: Request) -> dict:
        request.session["never"] = "saved"
        raise RuntimeError("handler failed")

    @app.get("/dependency")
    async def from_dependency(session: SessionDep) -> dict:
        session["visits"] = int(session.get("visits", 0)) + 1
        return {"visits": session["visits"]}

    if install:
        app.add_middleware(SessionMiddleware, **options)

    return app


async def send(
    app: Any,
    method: str,
    url: str,
    *,
    cookies: dict[str, str] | None = None,
) -> httpx.Response:
    """
    Sends a single request with an explicit Cookie header, no cookie jar is
    carried between calls.
    """
    headers = {}
    if cookies:
        headers["cookie"] = "; ".join(f"{name}={value}" for name, value in cookies.items())

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        return await client.request(method, url, headers=headers)


def set_cookie_headers(response: httpx.Response, name: str = "_session") -> list[str]:
    return [
        header
        for header in response.headers.get_list("set-cookie")
        if header.startswith(f"{name}=")
    ]


def cookie_value(response: httpx.Response, name: str = "_session") -> str:
    headers = set_cookie_headers(response, name)
    assert len(headers) == 1, headers
    return headers[0].split(";", 1)[0].split("=", 1)[1]


@pytest.fixture
def session_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger="fastapi_seshstore")
    return caplog
