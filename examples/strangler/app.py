"""Strangler — move endpoints off a legacy site one prefix at a time.

The route table lives in gateway.yaml. This module only adds a friendly
error page for when either side of the migration is down (502) or too
slow to answer (504).

Demonstrates:
- Gateway.from_file() with an ordered route table
- strip_prefix routes
- @gateway.error() for upstream failures

Run:
    figway run examples/strangler/gateway.yaml
    figway routes examples/strangler/gateway.yaml
or:
    cd examples/strangler && python app.py
"""

from pathlib import Path

import httpx

from figway import Gateway, Request
from figway.errors import UpstreamUnreachable

CONFIG_PATH = Path(__file__).parent / "gateway.yaml"


def create_gateway(transport: httpx.AsyncBaseTransport | None = None) -> Gateway:
    gateway = Gateway.from_file(CONFIG_PATH, transport=transport)

    @gateway.error(UpstreamUnreachable)
    def upstream_down(request: Request, exc: UpstreamUnreachable) -> str:
        return f"Service temporarily unavailable: {request.path}"

    return gateway


gateway = create_gateway()


if __name__ == "__main__":
    gateway.run()
