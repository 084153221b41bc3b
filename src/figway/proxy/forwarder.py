"""Upstream forwarding over httpx.

One round trip per request: the inbound request is replayed against the
resolved cluster with method, headers and body preserved, and the raw
upstream response is returned for relay. No retries, no redirects.
"""

import asyncio
import logging
import threading
from urllib.parse import quote_from_bytes

import httpx

from figway.errors import UpstreamTimeout, UpstreamUnreachable
from figway.http.headers import Headers
from figway.http.request import PATH_SAFE, Request
from figway.http.response import Response
from figway.routing.route import Cluster

logger = logging.getLogger("figway.proxy")

# RFC 9110 §7.6.1 connection-specific fields, plus the framing header
# that the transport recomputes on each side.
HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


def _connection_tokens(headers: Headers) -> set[str]:
    """Header names listed in ``Connection``, which are also hop-by-hop."""
    tokens: set[str] = set()
    for value in headers.get_list("connection"):
        tokens.update(token.strip().lower() for token in value.split(",") if token.strip())
    return tokens


def strip_hop_by_hop(headers: Headers) -> Headers:
    """Remove hop-by-hop headers and ``Content-Length``."""
    return headers.without(HOP_BY_HOP | _connection_tokens(headers) | {"content-length"})


class Forwarder:
    """Forwards requests to clusters through a pooled ``httpx.AsyncClient``.

    A client is created lazily per event loop (pounce may run several
    worker loops in one process) and closed by ``aclose()``.

    Usage::

        forwarder = Forwarder(timeout=5.0)
        response = await forwarder.forward(request, Cluster("legacy", "http://127.0.0.1:8080"))
        await forwarder.aclose()
    """

    __slots__ = (
        "_clients",
        "_lock",
        "_transport",
        "connect_timeout",
        "forwarded_headers",
        "max_connections",
        "timeout",
    )

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
        max_connections: int = 100,
        forwarded_headers: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.max_connections = max_connections
        self.forwarded_headers = forwarded_headers
        self._transport = transport
        self._clients: dict[asyncio.AbstractEventLoop, httpx.AsyncClient] = {}
        self._lock = threading.Lock()

    # -- Client lifecycle --

    def _client(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        client = self._clients.get(loop)
        if client is not None:
            return client
        with self._lock:
            client = self._clients.get(loop)
            if client is None:
                client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                    limits=httpx.Limits(max_connections=self.max_connections),
                    follow_redirects=False,
                    transport=self._transport,
                )
                self._clients[loop] = client
        return client

    async def aclose(self) -> None:
        """Close the client bound to the running event loop, if any."""
        loop = asyncio.get_running_loop()
        with self._lock:
            client = self._clients.pop(loop, None)
        if client is not None:
            await client.aclose()

    # -- Forwarding --

    def build_request(
        self,
        request: Request,
        body: bytes,
        cluster: Cluster,
        path: bytes | None = None,
    ) -> httpx.Request:
        """Build the outbound request for *cluster*.

        *path* is a percent-encoded target overriding the inbound raw
        path (used by ``strip_prefix`` routes); otherwise the raw path is
        sent unchanged, escapes included.
        """
        raw_target = request.raw_path if path is None else path
        # Existing escapes pass through; stray unsafe bytes get encoded
        target = quote_from_bytes(raw_target, safe=PATH_SAFE + "%")
        url = f"{cluster.scheme}://{cluster.host}{cluster.base_path}{target}"
        if request.query_string:
            url = f"{url}?{request.query_string.decode('latin-1')}"

        headers = strip_hop_by_hop(request.headers).replace("host", cluster.host)
        if self.forwarded_headers:
            headers = self._with_forwarded(headers, request)

        return httpx.Request(
            request.method,
            url,
            headers=headers.pairs(),
            content=body,
        )

    def _with_forwarded(self, headers: Headers, request: Request) -> Headers:
        if request.client is not None:
            # Earlier hops may arrive on several lines; keep them all, in order
            hops = [*request.headers.get_list("x-forwarded-for"), request.client[0]]
            headers = headers.replace("x-forwarded-for", ", ".join(hops))
        if request.host and "x-forwarded-host" not in headers:
            headers = headers.replace("x-forwarded-host", request.host)
        if "x-forwarded-proto" not in headers:
            headers = headers.replace("x-forwarded-proto", request.scheme)
        return headers

    async def forward(
        self,
        request: Request,
        cluster: Cluster,
        path: bytes | None = None,
    ) -> Response:
        """Send *request* to *cluster* and return the upstream response.

        The response status, headers (minus hop-by-hop) and raw body
        bytes are relayed unmodified; content encodings are not undone.

        Raises:
            UpstreamTimeout: If the upstream does not answer within the
                configured timeout.
            UpstreamUnreachable: If the connection fails or the upstream
                sends an unparseable response.
        """
        body = await request.body()
        outbound = self.build_request(request, body, cluster, path)
        logger.debug("-> %s %s (%s)", outbound.method, outbound.url, cluster.name)

        try:
            upstream = await self._client().send(outbound, stream=True)
            try:
                content = b"".join([chunk async for chunk in upstream.aiter_raw()])
            finally:
                await upstream.aclose()
        except httpx.TimeoutException as exc:
            limit = self.connect_timeout if isinstance(exc, httpx.ConnectTimeout) else self.timeout
            logger.warning(
                "Upstream %r timed out: %s %s", cluster.name, request.method, request.path
            )
            raise UpstreamTimeout(cluster.name, limit) from exc
        except httpx.TransportError as exc:
            logger.warning(
                "Upstream %r unreachable: %s %s (%s)",
                cluster.name,
                request.method,
                request.path,
                exc.__class__.__name__,
            )
            raise UpstreamUnreachable(cluster.name) from exc

        upstream_headers = Headers(tuple(upstream.headers.raw))
        response_headers = strip_hop_by_hop(upstream_headers)
        # HEAD and 304 answers carry no body to measure; relay the upstream's length
        declared = upstream_headers.get("content-length")
        if declared is not None and (request.method == "HEAD" or upstream.status_code == 304):
            response_headers = response_headers.replace("content-length", declared)
        return Response(
            body=content,
            status=upstream.status_code,
            headers=tuple(response_headers.pairs()),
        )
