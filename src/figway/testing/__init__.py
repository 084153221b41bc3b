"""Test utilities for figway gateways.

Provides an in-process test client and a loopback echo upstream::

    from figway.testing import TestClient, echo_app
"""

from figway.testing.client import TestClient
from figway.testing.upstream import echo_app, echoed_headers

__all__ = ["TestClient", "echo_app", "echoed_headers"]
