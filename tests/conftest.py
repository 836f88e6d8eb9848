"""pytest fixtures."""

import os
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from proxy_trust import ProxyTrustConfig, ProxyTrustMiddleware, register_exception_handlers


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep PROXY_TRUST_* variables and stray .env files out of the tests."""
    for key in list(os.environ):
        if key.startswith("PROXY_TRUST_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_scope() -> Callable[..., dict[str, Any]]:
    """Build an HTTP ASGI scope with the given peer address and headers."""

    def _make_scope(
        client: tuple[str, int] | None = ("127.0.0.1", 50000),
        headers: dict[str, str] | None = None,
        path: str = "/whoami",
    ) -> dict[str, Any]:
        raw_headers = [(b"host", b"testserver")]
        for name, value in (headers or {}).items():
            raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
        return {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "path": path,
            "raw_path": path.encode(),
            "query_string": b"",
            "root_path": "",
            "headers": raw_headers,
            "client": client,
            "server": ("testserver", 80),
        }

    return _make_scope


def create_app(config: ProxyTrustConfig) -> FastAPI:
    """FastAPI app echoing the client address and host it sees."""
    app = FastAPI()
    app.add_middleware(ProxyTrustMiddleware, config=config)
    register_exception_handlers(app)

    @app.get("/whoami")
    async def whoami(request: Request) -> dict:
        return {
            "client": request.client.host if request.client else None,
            "host": request.headers.get("host"),
        }

    return app


@pytest.fixture
def client_factory() -> Callable[..., AsyncClient]:
    """Create an AsyncClient for an app built from the given config and peer address."""

    def _factory(config: ProxyTrustConfig, peer: str = "127.0.0.1") -> AsyncClient:
        return AsyncClient(
            transport=ASGITransport(app=create_app(config), client=(peer, 123)),
            base_url="http://test",
        )

    return _factory


@pytest_asyncio.fixture
async def client(client_factory: Callable[..., AsyncClient]) -> AsyncGenerator[AsyncClient, None]:
    """Client against the default configuration (trust 127.0.0.1, strict)."""
    async with client_factory(ProxyTrustConfig()) as ac:
        yield ac
