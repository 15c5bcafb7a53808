"""CLI tests: commands talk to a mocked REST API through httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest
from click.testing import CliRunner

from aztopology.cli import main as cli_main
from aztopology.cli.main import cli

_VM = {
    "id": "/subscriptions/sub-1/resourceGroups/rg-app/providers/Microsoft.Compute/virtualMachines/app-vm",
    "type": "Microsoft.Compute/virtualMachines",
    "name": "app-vm",
    "subscriptionId": "sub-1",
    "resourceGroup": "rg-app",
    "location": "westeurope",
    "tags": None,
    "properties": None,
}


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/v1/resources/search":
        return httpx.Response(
            200,
            json={"query": request.url.params["query"], "resource_type": None, "count": 1, "resources": [_VM]},
        )
    if path == "/api/v1/path":
        return httpx.Response(200, json={"found": False, "hops": 0, "path": []})
    if path == "/api/v1/resources/neighbors":
        return httpx.Response(404, json={"error": "RESOURCE_NOT_FOUND", "detail": "Resource not found: /x"})
    if path == "/api/v1/topology":
        return httpx.Response(
            200,
            json={
                "node_count": 1,
                "edge_count": 0,
                "resource_types": ["Microsoft.Compute/virtualMachines"],
                "subscriptions": ["sub-1"],
                "resource_groups": ["rg-app"],
            },
        )
    if path == "/api/v1/topology/refresh" and request.method == "POST":
        return httpx.Response(200, json={"node_count": 1, "edge_count": 0, "built_at": "2026-01-01T00:00:00Z"})
    return httpx.Response(404, json={"error": "NOT_FOUND", "detail": path})


@pytest.fixture(autouse=True)
def _mock_api(monkeypatch: pytest.MonkeyPatch) -> None:
    def _client(api_url: str) -> httpx.Client:
        return httpx.Client(base_url=f"{api_url}/api/v1", transport=httpx.MockTransport(_handler))

    monkeypatch.setattr(cli_main, "_client", _client)


class TestCommands:
    def test_search(self) -> None:
        result = CliRunner().invoke(cli, ["search", "app"])
        assert result.exit_code == 0
        assert 'Found 1 resources matching "app":' in result.output
        assert "• app-vm (Microsoft.Compute/virtualMachines)" in result.output

    def test_search_json(self) -> None:
        result = CliRunner().invoke(cli, ["--json", "search", "app"])
        assert result.exit_code == 0
        assert json.loads(result.output)["count"] == 1

    def test_path_not_found_message(self) -> None:
        result = CliRunner().invoke(cli, ["path", "/a", "/b"])
        assert result.exit_code == 0
        assert "No connection path found" in result.output

    def test_api_error_exits_non_zero(self) -> None:
        result = CliRunner().invoke(cli, ["neighbors", "/x"])
        assert result.exit_code == 1
        assert "RESOURCE_NOT_FOUND" in result.output

    def test_export_summary(self) -> None:
        result = CliRunner().invoke(cli, ["export"])
        assert result.exit_code == 0
        assert "Total Resources: 1" in result.output
        assert "Resource Groups (1):" in result.output

    def test_refresh(self) -> None:
        result = CliRunner().invoke(cli, ["refresh"])
        assert result.exit_code == 0
        assert "Topology refreshed successfully." in result.output
