"""Tests for the maintenance example."""

import httpx

from figway.testing import TestClient, echo_app, echoed_headers


def _sent_headers(response) -> dict[str, str]:
    return dict(echoed_headers(response.header("x-echo-headers") or "[]"))


class TestMaintenanceGateway:
    async def test_billing_prefix_stripped(self, example_module) -> None:
        gateway = example_module.create_gateway(httpx.ASGITransport(app=echo_app))
        async with TestClient(gateway) as client:
            response = await client.get("/billing/plans")
        assert response.header("x-echo-path") == "/plans"
        assert _sent_headers(response)["host"] == "127.0.0.1:7000"

    async def test_unclaimed_paths_fall_back_to_legacy(self, example_module) -> None:
        gateway = example_module.create_gateway(httpx.ASGITransport(app=echo_app))
        async with TestClient(gateway) as client:
            response = await client.get("/about")
        assert _sent_headers(response)["host"] == "127.0.0.1:8080"

    async def test_request_id_added(self, example_module) -> None:
        gateway = example_module.create_gateway(httpx.ASGITransport(app=echo_app))
        async with TestClient(gateway) as client:
            response = await client.get("/invoices/1")
        assert len(_sent_headers(response)["x-request-id"]) == 32

    async def test_request_id_kept(self, example_module) -> None:
        gateway = example_module.create_gateway(httpx.ASGITransport(app=echo_app))
        async with TestClient(gateway) as client:
            response = await client.get("/invoices/1", headers={"X-Request-Id": "abc"})
        assert _sent_headers(response)["x-request-id"] == "abc"

    async def test_maintenance_switch(self, example_module) -> None:
        gateway = example_module.create_gateway(httpx.ASGITransport(app=echo_app))
        example_module.maintenance.enable("/billing")
        async with TestClient(gateway) as client:
            down = await client.get("/billing/plans")
            up = await client.get("/invoices/1")
        assert down.status == 503
        assert down.header("retry-after") == "120"
        assert up.status == 200
