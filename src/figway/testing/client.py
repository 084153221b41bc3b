"""Async test client for figway gateways.

Uses the same Request and Response types as production.
No wrapper translation layer.
"""

from typing import Any
from urllib.parse import unquote

from figway._internal.invoke import invoke
from figway.app import Gateway
from figway.http.response import Response


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for figway gateways.

    Returns the same ``Response`` type the gateway relays in production.
    Sends requests through the ASGI interface directly — no inbound
    socket involved. Upstream traffic goes wherever the gateway's
    transport sends it.

    Usage::

        async with TestClient(gateway) as client:
            response = await client.get("/api/users/42")
            assert response.status == 200
    """

    __slots__ = ("client_addr", "gateway")

    def __init__(
        self,
        gateway: Gateway,
        *,
        client_addr: tuple[str, int] = ("127.0.0.1", 0),
    ) -> None:
        self.gateway = gateway
        self.client_addr = client_addr

    async def __aenter__(self) -> "TestClient":
        self.gateway._ensure_frozen()
        for hook in self.gateway._startup_hooks:
            await invoke(hook)
        return self

    async def __aexit__(self, *args: object) -> None:
        for hook in self.gateway._shutdown_hooks:
            await invoke(hook)
        await self.gateway._forwarder.aclose()

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a HEAD request."""
        return await self.request("HEAD", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: dict[str, object] | None = None,
    ) -> Response:
        """Send a POST request."""
        extra_headers: dict[str, str] = {}
        request_body = body or b""

        if json is not None:
            import json as json_module

            request_body = json_module.dumps(json).encode("utf-8")
            extra_headers["content-type"] = "application/json"

        merged = {**extra_headers, **(headers or {})}
        return await self.request("POST", path, headers=merged, body=request_body)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send a PUT request."""
        return await self.request("PUT", path, headers=headers, body=body)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        body: bytes | None = None,
        chunk_size: int | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app.

        *path* is the target as a client sends it, percent-escapes
        included; the scope carries it decoded and raw.
        *headers* may be a list of pairs to send repeated names.
        *chunk_size* splits the body over several ``http.request``
        messages, as a streaming client would.
        """
        if "?" in path:
            path_part, query_string = path.split("?", 1)
        else:
            path_part = path
            query_string = ""

        pairs = list(headers.items()) if isinstance(headers, dict) else list(headers or [])
        raw_headers: list[tuple[bytes, bytes]] = [(b"host", b"testserver")]
        for name, value in pairs:
            if name.lower() == "host":
                raw_headers = [rh for rh in raw_headers if rh[0] != b"host"]
            raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "scheme": "http",
            "method": method.upper(),
            "path": unquote(path_part),
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": self.client_addr,
        }

        request_body = body or b""
        size = chunk_size or max(len(request_body), 1)
        chunks = [request_body[i : i + size] for i in range(0, len(request_body), size)] or [b""]
        messages = [
            {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
            for i, chunk in enumerate(chunks)
        ]

        async def receive() -> dict[str, Any]:
            if messages:
                return messages.pop(0)
            return {"type": "http.disconnect"}

        response_status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        response_body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                response_body_parts.append(message.get("body", b""))

        await self.gateway(scope, receive, send)

        return Response(
            body=b"".join(response_body_parts),
            status=response_status,
            headers=tuple(
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in response_headers
            ),
        )
