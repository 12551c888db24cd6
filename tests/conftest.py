"""Shared fixtures for the supply chain tests."""

from typing import Iterator

import pytest

from supply_chain import (
    AppContext,
    Client,
    Order,
    StableMemory,
    Supplier,
    SupplyChainService,
)
from supply_chain.server import set_service


class FakeClock:
    """Deterministic clock: every call returns a value ``step`` larger than the last."""

    def __init__(self, start: int = 1_000, step: int = 1_000) -> None:
        self.current = start
        self.step = step

    def now(self) -> int:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory() -> StableMemory:
    """In-memory storage, nothing written to disk."""
    return StableMemory(database_file=None)


@pytest.fixture
def service(memory: StableMemory, clock: FakeClock) -> SupplyChainService:
    return SupplyChainService(AppContext.from_memory(memory, clock))


@pytest.fixture
def client(service: SupplyChainService) -> Client:
    return service.add_client({"name": "Acme", "email": "orders@acme.com", "phone": "5551234"})


@pytest.fixture
def supplier(service: SupplyChainService) -> Supplier:
    return service.add_supplier({"name": "Bolt Co", "phone": "5550100", "preferred_items": ["bolts"]})


@pytest.fixture
def order(service: SupplyChainService, client: Client) -> Order:
    return service.add_order(
        {"title": "Bolts restock", "client_id": client.id, "item_types": ["bolts"], "products": {"bolts": 100}}
    )


@pytest.fixture
def completed_order(service: SupplyChainService, order: Order, supplier: Supplier) -> Order:
    service.add_order_supplier(order.id, supplier.id)
    return service.complete_order(order.id)


@pytest.fixture
def served(service: SupplyChainService) -> Iterator[SupplyChainService]:
    """Install the test service behind the MCP server functions."""
    set_service(service)
    yield service
    set_service(None)
