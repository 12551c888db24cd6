"""Read-only queries over the order and supplier stores.

All queries scan the whole store. Queries that match nothing raise NotFound
instead of returning an empty list; the catalog listings (``list_clients``,
``list_suppliers``) are the exception and may return empty lists.
"""

import logging
from typing import (
    Any,
    Callable,
    List,
    Mapping,
    Set,
    Union,
)

from .context import ContextBound
from .errors import NotFound
from .models import (
    Client,
    ClientEngagement,
    Order,
    OrderFilterCriteria,
    Supplier,
)
from .validation import validate_payload


logger = logging.getLogger(__name__)


def matches_criteria(order: Order, criteria: OrderFilterCriteria) -> bool:
    """True when the order satisfies every criterion that is set."""
    if criteria.start_date is not None and order.created_at < criteria.start_date:
        return False
    if criteria.end_date is not None and order.created_at > criteria.end_date:
        return False
    if criteria.is_complete is not None and order.is_complete != criteria.is_complete:
        return False
    if criteria.client_id is not None and order.client_id != criteria.client_id:
        return False
    if criteria.supplier_id is not None and order.supplier_id != criteria.supplier_id:
        return False
    if criteria.product is not None and criteria.product not in order.products:
        return False
    return True


class OrderQueries(ContextBound):
    """Filters, recommendations and engagement statistics."""

    def _scan(self, predicate: Callable[[Order], bool], not_found_msg: str) -> List[Order]:
        orders = [order for order in self.context.orders.values() if predicate(order)]
        if not orders:
            raise NotFound(not_found_msg)
        return orders

    # ==============================================================================
    # Catalog
    # ==============================================================================

    def list_clients(self) -> List[Client]:
        """List all clients by ascending id."""
        return self.context.clients.values()

    def list_suppliers(self) -> List[Supplier]:
        """List all suppliers by ascending id."""
        return self.context.suppliers.values()

    # ==============================================================================
    # Order listings
    # ==============================================================================

    def get_orders(self) -> List[Order]:
        return self._scan(lambda order: True, "no orders available")

    def get_incomplete_orders(self) -> List[Order]:
        return self._scan(lambda order: not order.is_complete, "no incomplete orders available")

    def get_completed_orders(self) -> List[Order]:
        return self._scan(lambda order: order.is_complete, "no completed orders available")

    def get_client_orders(self, client_id: int) -> List[Order]:
        """Orders whose ``client_id`` is the given client.

        Raises:
            NotFound: If the client does not exist or has no orders
        """
        self.get_client(client_id)
        return self._scan(
            lambda order: order.client_id == client_id,
            f"no orders found for client id:{client_id}",
        )

    def get_supplier_orders(self, supplier_id: int) -> List[Order]:
        """Orders assigned to the given supplier.

        Raises:
            NotFound: If the supplier does not exist or has no orders
        """
        self.get_supplier(supplier_id)
        return self._scan(
            lambda order: order.supplier_id == supplier_id,
            f"no orders found for supplier id:{supplier_id}",
        )

    def get_supplier_completed_orders(self, supplier_id: int) -> List[Order]:
        """Completed orders assigned to the given supplier.

        Raises:
            NotFound: If the supplier does not exist or has no completed orders
        """
        self.get_supplier(supplier_id)
        return self._scan(
            lambda order: order.supplier_id == supplier_id and order.is_complete,
            f"no completed orders found for supplier id:{supplier_id}",
        )

    def get_supplier_preferred_orders(self, supplier_id: int) -> List[Order]:
        """Orders sharing at least one item type with the supplier's preferred items.

        Raises:
            NotFound: If the supplier does not exist or no order matches
        """
        preferred = set(self.get_supplier(supplier_id).preferred_items)
        return self._scan(
            lambda order: not preferred.isdisjoint(order.item_types),
            f"no orders match the preferred items of supplier id:{supplier_id}",
        )

    def filter_orders_by_criteria(self, criteria: Union[OrderFilterCriteria, Mapping[str, Any]]) -> List[Order]:
        """Orders matching every criterion that is set; unset criteria match everything.

        Args:
            criteria: OrderFilterCriteria or a mapping with the same fields

        Raises:
            InvalidPayload: If the criteria are malformed
            NotFound: If no order matches
        """
        parsed = validate_payload(OrderFilterCriteria, criteria)
        return self._scan(
            lambda order: matches_criteria(order, parsed),
            "no orders match the given criteria",
        )

    # ==============================================================================
    # Relationship traversal
    # ==============================================================================

    def suggest_suppliers_for_client(self, client_id: int) -> List[Supplier]:
        """Suggest suppliers that fulfilled orders with products this client orders.

        Collects the product names of the client's recorded orders, then walks
        every supplier's recorded orders and adds the supplier once per order
        that shares a product name. Recorded orders that were deleted or moved
        to another client or supplier are skipped. A supplier can appear several
        times, once per overlapping order.

        Raises:
            NotFound: If the client does not exist or nothing overlaps
        """
        client = self.get_client(client_id)

        client_products: Set[str] = set()
        for order in self._client_orders(client):
            client_products.update(order.products)

        suggestions: List[Supplier] = []
        if client_products:
            for supplier in self.context.suppliers.values():
                for order in self._supplier_orders(supplier):
                    if not client_products.isdisjoint(order.products):
                        suggestions.append(supplier)

        if not suggestions:
            raise NotFound(f"no supplier suggestions for client id:{client_id}")
        logger.debug("Suggested %d suppliers for client %s", len(suggestions), client_id)
        return suggestions

    def analyze_client_engagement(self, client_id: int) -> ClientEngagement:
        """Count the client's recorded orders and their distinct products.

        Deleted orders and orders moved to another client are not counted.

        Raises:
            NotFound: If the client does not exist
        """
        client = self.get_client(client_id)

        total_orders = 0
        products: Set[str] = set()
        for order in self._client_orders(client):
            total_orders += 1
            products.update(order.products)

        return ClientEngagement(
            client_id=client_id,
            total_orders=total_orders,
            distinct_products=len(products),
        )
