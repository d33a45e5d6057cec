"""Tests for the health endpoint."""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from botina.health import HealthServer, create_health_app


@pytest.fixture
def client():
    return TestClient(create_health_app())


class TestHealthApp:
    def test_health_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.text == "OK"

    def test_unknown_path(self, client):
        assert client.get("/").status_code == 404

    def test_docs_disabled(self, client):
        assert client.get("/docs").status_code == 404


class TestHealthServer:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, unused_tcp_port):
        server = HealthServer(host="127.0.0.1", port=unused_tcp_port)
        await server.start()
        try:
            for _ in range(100):
                if server.started:
                    break
                await asyncio.sleep(0.05)
            assert server.started

            async with httpx.AsyncClient() as http:
                response = await http.get(f"http://127.0.0.1:{unused_tcp_port}/health")
            assert response.status_code == 200
            assert response.text == "OK"
        finally:
            await server.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        await HealthServer(port=0).stop()
