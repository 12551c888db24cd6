"""Mutating operations and the cross-store rules they enforce.

Every operation validates its payload and resolves its foreign keys before the
first write. Completing an order writes three records (the order, then its
client and supplier) without a transaction; ``rebuild_order_links`` recomputes
the client and supplier ``order_ids`` caches from the orders when they lag
behind.
"""

import logging
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Union,
)

from .context import ContextBound
from .errors import (
    AlreadyCompleted,
    NotFound,
)
from .models import (
    Client,
    ClientPayload,
    Order,
    OrderPayload,
    Supplier,
    SupplierPayload,
)
from .validation import validate_payload


logger = logging.getLogger(__name__)


def _reconcile(recorded: List[int], linked: List[int]) -> List[int]:
    """Keep recorded ids found in ``linked`` in their order, then append the rest of ``linked``."""
    wanted = set(linked)
    kept: List[int] = []
    for order_id in recorded:
        if order_id in wanted and order_id not in kept:
            kept.append(order_id)
    return kept + [order_id for order_id in linked if order_id not in kept]


class ReferentialIntegrity(ContextBound):
    """Create, update, complete and delete entities while keeping references valid."""

    # ==============================================================================
    # Clients and suppliers
    # ==============================================================================

    def add_client(self, payload: Union[ClientPayload, Mapping[str, Any]]) -> Client:
        """Validate the payload and store a new client with no recorded orders.

        Raises:
            InvalidPayload: If the name or phone is malformed
        """
        data = validate_payload(ClientPayload, payload)
        client = Client(
            id=self.context.ids.next_id(),
            name=data.name,
            email=data.email,
            phone=data.phone,
            order_ids=[],
            created_at=self.context.clock.now(),
            updated_at=None,
        )
        self.context.clients.put(client)
        logger.info("Added client %s", client.id)
        return client

    def add_supplier(self, payload: Union[SupplierPayload, Mapping[str, Any]]) -> Supplier:
        """Validate the payload and store a new supplier with no recorded orders.

        Raises:
            InvalidPayload: If the name or phone is malformed
        """
        data = validate_payload(SupplierPayload, payload)
        supplier = Supplier(
            id=self.context.ids.next_id(),
            name=data.name,
            email=data.email,
            phone=data.phone,
            preferred_items=data.preferred_items,
            order_ids=[],
            created_at=self.context.clock.now(),
            updated_at=None,
        )
        self.context.suppliers.put(supplier)
        logger.info("Added supplier %s", supplier.id)
        return supplier

    # ==============================================================================
    # Orders
    # ==============================================================================

    def add_order(self, payload: Union[OrderPayload, Mapping[str, Any]]) -> Order:
        """Store a new draft order for an existing client.

        The payload's ``supplier_id`` is ignored; new orders never have a supplier.

        Raises:
            InvalidPayload: If the title is empty or a field has the wrong type
            NotFound: If the client does not exist
        """
        data = validate_payload(OrderPayload, payload)
        self.get_client(data.client_id)

        order = Order(
            id=self.context.ids.next_id(),
            title=data.title,
            client_id=data.client_id,
            supplier_id=None,
            item_types=data.item_types,
            products=data.products,
            is_complete=False,
            created_at=self.context.clock.now(),
            updated_at=None,
        )
        self.context.orders.put(order)
        logger.info("Added order %s for client %s", order.id, order.client_id)
        return order

    def add_order_supplier(self, order_id: int, supplier_id: int) -> Order:
        """Assign a supplier to an order.

        Raises:
            NotFound: If the order or the supplier does not exist
        """
        order = self.get_order(order_id)
        self.get_supplier(supplier_id)

        updated = order.model_copy(update={"supplier_id": supplier_id, "updated_at": self.context.clock.now()})
        self.context.orders.put(updated)
        logger.info("Assigned supplier %s to order %s", supplier_id, order_id)
        return updated

    def update_order(self, order_id: int, payload: Union[OrderPayload, Mapping[str, Any]]) -> Order:
        """Replace an order's title, client, supplier, item types and products.

        ``id``, ``created_at`` and the completion flag are kept. When the payload
        leaves ``supplier_id`` unset the current supplier is kept, and it must
        still exist.

        Raises:
            NotFound: If the order, the client or the supplier does not exist
            InvalidPayload: If the payload is malformed
        """
        order = self.get_order(order_id)
        data = validate_payload(OrderPayload, payload)

        self.get_client(data.client_id)
        supplier_id = data.supplier_id if data.supplier_id is not None else order.supplier_id
        if supplier_id is not None:
            self.get_supplier(supplier_id)

        updated = order.model_copy(
            update={
                "title": data.title,
                "client_id": data.client_id,
                "supplier_id": supplier_id,
                "item_types": data.item_types,
                "products": data.products,
                "updated_at": self.context.clock.now(),
            }
        )
        self.context.orders.put(updated)
        logger.info("Updated order %s", order_id)
        return updated

    def complete_order(self, order_id: int) -> Order:
        """Mark an order complete and record it on its client and supplier.

        Raises:
            NotFound: If the order, its client or its supplier does not exist,
                or no supplier is set
            AlreadyCompleted: If the order is already complete
        """
        order = self.get_order(order_id)
        if order.is_complete:
            logger.warning("Rejected completion of order %s: already complete", order_id)
            raise AlreadyCompleted(f"order id:{order_id} is already complete")

        client = self.get_client(order.client_id)
        if order.supplier_id is None:
            logger.warning("Rejected completion of order %s: no supplier", order_id)
            raise NotFound(f"order id:{order_id} has no supplier set")
        supplier = self.get_supplier(order.supplier_id)

        completed = order.model_copy(update={"is_complete": True, "updated_at": self.context.clock.now()})
        self.context.orders.put(completed)

        # Not atomic with the order write above, see rebuild_order_links.
        if completed.id not in client.order_ids:
            self.context.clients.put(client.model_copy(update={"order_ids": [*client.order_ids, completed.id]}))
        if completed.id not in supplier.order_ids:
            self.context.suppliers.put(
                supplier.model_copy(update={"order_ids": [*supplier.order_ids, completed.id]})
            )

        logger.info("Completed order %s (client %s, supplier %s)", order_id, client.id, supplier.id)
        return completed

    def delete_order(self, order_id: int) -> Order:
        """Remove an order and return it.

        Ids already recorded in client and supplier ``order_ids`` are left in
        place; lookups skip them.

        Raises:
            NotFound: If the order does not exist
        """
        order = self.context.orders.remove(order_id)
        if order is None:
            raise NotFound(f"order id:{order_id} deletion unsuccessful, order not found")
        logger.info("Deleted order %s", order_id)
        return order

    # ==============================================================================
    # Reconciliation
    # ==============================================================================

    def rebuild_order_links(self) -> Dict[str, int]:
        """Reconcile every client's and supplier's ``order_ids`` with the completed orders.

        Recorded ids that still point at a completed order linked to the entity
        keep their position. Ids of deleted, moved or duplicate entries are
        dropped, and completed orders missing from the list are appended by
        ascending id. Only entities whose list changes are rewritten.

        Returns:
            Dictionary with counts of rewritten entities:
            {
                "rewritten_clients": int,
                "rewritten_suppliers": int
            }
        """
        client_links: Dict[int, List[int]] = {}
        supplier_links: Dict[int, List[int]] = {}
        for order in self.context.orders.values():
            if not order.is_complete:
                continue
            client_links.setdefault(order.client_id, []).append(order.id)
            if order.supplier_id is not None:
                supplier_links.setdefault(order.supplier_id, []).append(order.id)

        counts = {"rewritten_clients": 0, "rewritten_suppliers": 0}

        for client in self.context.clients.values():
            order_ids = _reconcile(client.order_ids, client_links.get(client.id, []))
            if client.order_ids != order_ids:
                self.context.clients.put(client.model_copy(update={"order_ids": order_ids}))
                counts["rewritten_clients"] += 1

        for supplier in self.context.suppliers.values():
            order_ids = _reconcile(supplier.order_ids, supplier_links.get(supplier.id, []))
            if supplier.order_ids != order_ids:
                self.context.suppliers.put(supplier.model_copy(update={"order_ids": order_ids}))
                counts["rewritten_suppliers"] += 1

        logger.info(
            "Rebuilt order links: %d clients, %d suppliers rewritten",
            counts["rewritten_clients"],
            counts["rewritten_suppliers"],
        )
        return counts
