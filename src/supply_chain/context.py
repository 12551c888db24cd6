"""Explicitly owned state shared by the operation layers."""

import logging
from dataclasses import dataclass
from typing import (
    Iterable,
    Iterator,
    Optional,
)

from .clock import (
    Clock,
    SystemClock,
)
from .errors import NotFound
from .models import (
    Client,
    Order,
    Supplier,
)
from .storage import (
    CLIENT_REGION,
    ORDER_REGION,
    SUPPLIER_REGION,
    EntityStore,
    IdCounter,
    StableMemory,
)


logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """The id counter, the three entity stores and the clock.

    Build one per memory; tests build isolated instances over in-memory
    storage.
    """

    ids: IdCounter
    clients: EntityStore[Client]
    suppliers: EntityStore[Supplier]
    orders: EntityStore[Order]
    clock: Clock

    @classmethod
    def from_memory(cls, memory: StableMemory, clock: Optional[Clock] = None) -> "AppContext":
        return cls(
            ids=IdCounter(memory),
            clients=EntityStore(memory, CLIENT_REGION, Client),
            suppliers=EntityStore(memory, SUPPLIER_REGION, Supplier),
            orders=EntityStore(memory, ORDER_REGION, Order),
            clock=clock or SystemClock(),
        )


class ContextBound:
    """Base for operation layers: entity lookups that raise NotFound."""

    def __init__(self, context: AppContext) -> None:
        self.context = context

    def get_client(self, client_id: int) -> Client:
        client = self.context.clients.get(client_id)
        if client is None:
            raise NotFound(f"client id:{client_id} does not exist")
        return client

    def get_supplier(self, supplier_id: int) -> Supplier:
        supplier = self.context.suppliers.get(supplier_id)
        if supplier is None:
            raise NotFound(f"supplier id:{supplier_id} does not exist")
        return supplier

    def get_order(self, order_id: int) -> Order:
        order = self.context.orders.get(order_id)
        if order is None:
            raise NotFound(f"order id:{order_id} does not exist")
        return order

    def _resolve_orders(self, order_ids: Iterable[int]) -> Iterator[Order]:
        """Yield the orders that still exist, skipping ids of deleted orders."""
        for order_id in order_ids:
            order = self.context.orders.get(order_id)
            if order is None:
                logger.debug("Skipping dangling order id %s", order_id)
                continue
            yield order

    def _client_orders(self, client: Client) -> Iterator[Order]:
        """Recorded orders of a client that still name it as their client."""
        for order in self._resolve_orders(client.order_ids):
            if order.client_id != client.id:
                logger.debug("Skipping order %s moved away from client %s", order.id, client.id)
                continue
            yield order

    def _supplier_orders(self, supplier: Supplier) -> Iterator[Order]:
        """Recorded orders of a supplier that still name it as their supplier."""
        for order in self._resolve_orders(supplier.order_ids):
            if order.supplier_id != supplier.id:
                logger.debug("Skipping order %s moved away from supplier %s", order.id, supplier.id)
                continue
            yield order
