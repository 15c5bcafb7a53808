"""aztopology command-line interface.

``serve`` runs the application in-process; every other command is a thin
client of the REST API (``AZTOPO_API_ENABLED=true`` on the server side).
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
import httpx

_DEFAULT_API_URL = "http://localhost:8080"
_TIMEOUT_SECONDS = 120.0


def _client(api_url: str) -> httpx.Client:
    return httpx.Client(base_url=f"{api_url.rstrip('/')}/api/v1", timeout=_TIMEOUT_SECONDS)


def _request(ctx: click.Context, method: str, path: str, params: dict[str, Any] | None = None) -> Any:
    """Call the API and return the decoded JSON body; exit 1 on any failure."""
    try:
        with _client(ctx.obj["api_url"]) as client:
            response = client.request(method, path, params=params)
    except httpx.HTTPError as exc:
        click.echo(f"error: cannot reach aztopology API: {exc}", err=True)
        sys.exit(1)

    try:
        body = response.json()
    except ValueError:
        body = {"error": "INVALID_RESPONSE", "detail": response.text}
    if response.status_code >= 400:
        error = body.get("error", "ERROR") if isinstance(body, dict) else "ERROR"
        detail = body.get("detail", "") if isinstance(body, dict) else str(body)
        click.echo(f"error: {error}: {detail}", err=True)
        sys.exit(1)
    return body


def _echo_resource_line(resource: dict[str, Any]) -> None:
    click.echo(f"• {resource['name']} ({resource['type']})")
    click.echo(f"  Resource Group: {resource['resourceGroup']}")
    click.echo(f"  Location: {resource['location']}")
    click.echo(f"  ID: {resource['id']}")


@click.group()
@click.option(
    "--api-url",
    envvar="AZTOPO_API_URL",
    default=_DEFAULT_API_URL,
    show_default=True,
    help="Base URL of a running aztopology REST API.",
)
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON responses.")
@click.pass_context
def cli(ctx: click.Context, api_url: str, as_json: bool) -> None:
    """Query the Azure resource topology graph."""
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url
    ctx.obj["as_json"] = as_json


@cli.command()
def serve() -> None:
    """Run the topology server (MCP stdio and optional REST API)."""
    from aztopology.app import main

    asyncio.run(main())


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show cache state without triggering a rebuild."""
    body = _request(ctx, "GET", "/status")
    if ctx.obj["as_json"]:
        click.echo(json.dumps(body, indent=2))
        return
    if not body["has_graph"]:
        click.echo("No topology built yet.")
    else:
        click.echo(f"Resources: {body['node_count']}")
        click.echo(f"Connections: {body['edge_count']}")
        click.echo(f"Built at: {body['built_at']}")
        click.echo(f"Stale: {'yes' if body['stale'] else 'no'}")
    if body.get("last_error"):
        click.echo(f"Last error: {body['last_error']}")


@cli.command()
@click.argument("query", default="")
@click.option("--type", "resource_type", default=None, help="Only resources whose type contains this text.")
@click.pass_context
def search(ctx: click.Context, query: str, resource_type: str | None) -> None:
    """Search resources by name, type, resource group, location or tag value."""
    params: dict[str, Any] = {"query": query}
    if resource_type:
        params["resource_type"] = resource_type
    body = _request(ctx, "GET", "/resources/search", params)
    if ctx.obj["as_json"]:
        click.echo(json.dumps(body, indent=2))
        return
    click.echo(f'Found {body["count"]} resources matching "{query}":')
    for resource in body["resources"]:
        click.echo("")
        _echo_resource_line(resource)


@cli.command()
@click.argument("resource_id")
@click.pass_context
def show(ctx: click.Context, resource_id: str) -> None:
    """Show one resource with its tags and properties."""
    body = _request(ctx, "GET", "/resources/item", {"resource_id": resource_id})
    click.echo(json.dumps(body, indent=2))


@cli.command()
@click.argument("resource_id")
@click.pass_context
def neighbors(ctx: click.Context, resource_id: str) -> None:
    """List resources connected to RESOURCE_ID."""
    body = _request(ctx, "GET", "/resources/neighbors", {"resource_id": resource_id})
    if ctx.obj["as_json"]:
        click.echo(json.dumps(body, indent=2))
        return
    node = body["resource"]
    click.echo(f"Resource: {node['name']} ({node['type']})")
    click.echo(f"Connected Resources ({len(body['neighbors'])}):")
    for resource in body["neighbors"]:
        click.echo("")
        _echo_resource_line(resource)


@cli.command()
@click.argument("source_id")
@click.argument("target_id")
@click.pass_context
def path(ctx: click.Context, source_id: str, target_id: str) -> None:
    """Shortest connection path between two resources."""
    body = _request(ctx, "GET", "/path", {"source_id": source_id, "target_id": target_id})
    if ctx.obj["as_json"]:
        click.echo(json.dumps(body, indent=2))
        return
    if not body["found"]:
        click.echo("No connection path found between the specified resources.")
        return
    click.echo(f"Connection Path ({body['hops']} hops):")
    for index, node in enumerate(body["path"], start=1):
        click.echo(f"{index}. {node['name']} ({node['type']})")
        click.echo(f"   {node['id']}")


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["summary", "json"]),
    default="summary",
    show_default=True,
)
@click.pass_context
def export(ctx: click.Context, fmt: str) -> None:
    """Export the topology as a summary or as the full JSON graph."""
    body = _request(ctx, "GET", "/topology", {"format": fmt})
    if fmt == "json" or ctx.obj["as_json"]:
        click.echo(json.dumps(body, indent=2))
        return
    click.echo(f"Total Resources: {body['node_count']}")
    click.echo(f"Total Connections: {body['edge_count']}")
    for title, key in (
        ("Subscriptions", "subscriptions"),
        ("Resource Groups", "resource_groups"),
        ("Resource Types", "resource_types"),
    ):
        values = body[key]
        click.echo(f"\n{title} ({len(values)}):")
        for value in values:
            click.echo(f"• {value}")


@cli.command()
@click.pass_context
def refresh(ctx: click.Context) -> None:
    """Drop the cached topology and rebuild it from Azure."""
    body = _request(ctx, "POST", "/topology/refresh")
    click.echo("Topology refreshed successfully.")
    click.echo(f"Resources: {body['node_count']}")
    click.echo(f"Connections: {body['edge_count']}")
