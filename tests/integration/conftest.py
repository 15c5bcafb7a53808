"""Shared fixtures for aztopology integration tests.

Provides a realistic two-subscription inventory (hub network, web tier,
data tier) served by an in-memory fetcher, wired through the real cache and
service so tests exercise the full build and query pipeline without Azure.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from aztopology.cache.topology_cache import TopologyCache
from aztopology.models.resources import RawResource
from aztopology.service import TopologyService

SUB_PROD = "aaaaaaaa-0000-0000-0000-000000000001"
SUB_SHARED = "bbbbbbbb-0000-0000-0000-000000000002"


def resource_id(sub: str, rg: str, provider_type: str, name: str) -> str:
    return f"/subscriptions/{sub}/resourceGroups/{rg}/providers/{provider_type}/{name}"


HUB_VNET = resource_id(SUB_SHARED, "rg-network", "Microsoft.Network/virtualNetworks", "hub-vnet")
HUB_SUBNET = f"{HUB_VNET}/subnets/workloads"
HUB_GATEWAY_SUBNET = f"{HUB_VNET}/subnets/GatewaySubnet"
WEB_VM = resource_id(SUB_PROD, "rg-web", "Microsoft.Compute/virtualMachines", "web-vm-01")
WEB_NIC = resource_id(SUB_PROD, "rg-web", "Microsoft.Network/networkInterfaces", "web-vm-01-nic")
WEB_NIC_2 = resource_id(SUB_PROD, "rg-web", "Microsoft.Network/networkInterfaces", "web-vm-01-nic-2")
WEB_PIP = resource_id(SUB_PROD, "rg-web", "Microsoft.Network/publicIPAddresses", "web-pip")
SQL_SERVER = resource_id(SUB_PROD, "rg-data", "Microsoft.Sql/servers", "orders-sql")
SQL_DB = f"{SQL_SERVER}/databases/orders"


def make_resource(
    id: str,
    type: str,
    sub: str,
    rg: str,
    location: str = "westeurope",
    tags: dict[str, str] | None = None,
    properties: Any = None,
) -> RawResource:
    """Create a RawResource with sensible defaults for testing."""
    return RawResource(
        id=id,
        type=type,
        name=id.rsplit("/", 1)[-1],
        subscription_id=sub,
        resource_group=rg,
        location=location,
        tags=tags,
        properties=properties,
    )


def sample_inventory() -> list[RawResource]:
    """Inventory in Resource Graph's ``order by name asc`` order."""
    return [
        make_resource(HUB_GATEWAY_SUBNET, "microsoft.network/virtualnetworks/subnets", SUB_SHARED, "rg-network"),
        make_resource(
            HUB_VNET,
            "microsoft.network/virtualnetworks",
            SUB_SHARED,
            "rg-network",
            tags={"owner": "netops"},
            properties={"addressSpace": {"addressPrefixes": ["10.0.0.0/16"]}},
        ),
        make_resource(SQL_DB, "microsoft.sql/servers/databases", SUB_PROD, "rg-data", tags={"app": "orders"}),
        make_resource(SQL_SERVER, "microsoft.sql/servers", SUB_PROD, "rg-data", location="northeurope"),
        make_resource(WEB_PIP, "microsoft.network/publicipaddresses", SUB_PROD, "rg-web"),
        make_resource(
            WEB_VM,
            "microsoft.compute/virtualmachines",
            SUB_PROD,
            "rg-web",
            tags={"app": "storefront", "env": "prod"},
            properties={
                "hardwareProfile": {"vmSize": "Standard_D2s_v5"},
                "networkProfile": {
                    "networkInterfaces": [
                        {"id": WEB_NIC, "properties": {"primary": True}},
                        {"id": WEB_NIC_2},
                    ]
                },
            },
        ),
        make_resource(WEB_NIC, "microsoft.network/networkinterfaces", SUB_PROD, "rg-web"),
        make_resource(WEB_NIC_2, "microsoft.network/networkinterfaces", SUB_PROD, "rg-web"),
        make_resource(HUB_SUBNET, "microsoft.network/virtualnetworks/subnets", SUB_SHARED, "rg-network"),
    ]


class InMemoryFetcher:
    """Fetcher double serving a mutable inventory and counting calls."""

    def __init__(self, resources: list[RawResource]) -> None:
        self.resources = resources
        self.calls = 0

    async def fetch_all(self, subscription_ids: Sequence[str]) -> list[RawResource]:
        self.calls += 1
        wanted = set(subscription_ids)
        return [r for r in self.resources if r.subscription_id in wanted]


class ManualClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 6, 1, 8, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fetcher() -> InMemoryFetcher:
    return InMemoryFetcher(sample_inventory())


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(fetcher: InMemoryFetcher, clock: ManualClock) -> TopologyCache:
    return TopologyCache(fetcher, [SUB_PROD, SUB_SHARED], clock=clock)


@pytest.fixture
def service(cache: TopologyCache) -> TopologyService:
    return TopologyService(cache)
