"""Maintenance — a gateway built in Python with custom middleware.

Demonstrates:
- Gateway() with programmatic clusters and routes
- Function middleware (request id stamping)
- Class middleware (per-prefix maintenance switch, returns 503)
- fallback_cluster for paths no route claims

Run:
    cd examples/maintenance && python app.py
"""

import threading
import uuid
from dataclasses import replace

import httpx

from figway import Gateway, GatewayConfig, Request, Response
from figway.http.response import plain_text
from figway.middleware.protocol import Next

# ---------------------------------------------------------------------------
# Function middleware: request id
# ---------------------------------------------------------------------------


async def request_id(request: Request, next: Next) -> Response:
    """Stamp X-Request-Id on the forwarded request unless the client sent one."""
    if "x-request-id" not in request.headers:
        headers = request.headers.replace("x-request-id", uuid.uuid4().hex)
        request = replace(request, headers=headers)
    return await next(request)


# ---------------------------------------------------------------------------
# Class middleware: maintenance switch
# ---------------------------------------------------------------------------


class MaintenanceSwitch:
    """Answer 503 for prefixes under maintenance instead of forwarding."""

    def __init__(self) -> None:
        self._prefixes: set[str] = set()
        self._lock = threading.Lock()

    def enable(self, prefix: str) -> None:
        with self._lock:
            self._prefixes.add(prefix)

    def disable(self, prefix: str) -> None:
        with self._lock:
            self._prefixes.discard(prefix)

    async def __call__(self, request: Request, next: Next) -> Response:
        with self._lock:
            down = any(request.path.startswith(p) for p in self._prefixes)
        if down:
            return plain_text("Down for maintenance", 503).with_header("Retry-After", "120")
        return await next(request)


def create_gateway(transport: httpx.AsyncBaseTransport | None = None) -> Gateway:
    gateway = Gateway(GatewayConfig(fallback_cluster="legacy"), transport=transport)
    gateway.cluster("legacy", "http://127.0.0.1:8080")
    gateway.cluster("billing", "http://127.0.0.1:7000")
    gateway.route("/billing/*", "billing", strip_prefix=True)
    gateway.route("/invoices/*", "billing")

    gateway.add_middleware(request_id)
    gateway.add_middleware(maintenance)
    return gateway


maintenance = MaintenanceSwitch()
gateway = create_gateway()


if __name__ == "__main__":
    gateway.run()
