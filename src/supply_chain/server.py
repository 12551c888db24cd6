"""MCP server exposing the supply chain operations as tools and resources.

Mutating tools let business errors propagate, so the MCP client receives them
as tool errors. Query tools return the error message instead of raising when
nothing matches, the same way the catalog resources report missing entities.
"""

import logging
from typing import (
    Dict,
    List,
    Optional,
    Union,
)

from mcp.server.fastmcp import FastMCP

from .config import load_config
from .errors import NotFound
from .models import (
    Client,
    ClientEngagement,
    Order,
    OrderFilterCriteria,
    Supplier,
)
from .service import (
    SupplyChainService,
    build_service,
)
from .utils import configure_logging


logger = logging.getLogger(__name__)

_service: Optional[SupplyChainService] = None


def get_service() -> SupplyChainService:
    """Return the served instance, building it from the environment on first use."""
    global _service  # pylint: disable=global-statement
    if _service is None:
        config = load_config()
        configure_logging(level=config.log_level)
        _service = build_service(config)
    return _service


def set_service(service: Optional[SupplyChainService]) -> None:
    """Replace the served instance (None rebuilds it from the environment on next use)."""
    global _service  # pylint: disable=global-statement
    _service = service


def _parse_id(raw: str, kind: str) -> int:
    try:
        value = int(raw)
    except ValueError as e:
        raise NotFound(f"{kind} id:{raw} does not exist") from e
    if value < 0:
        raise NotFound(f"{kind} id:{raw} does not exist")
    return value


# Create server
mcp = FastMCP("Supply Chain Server")


@mcp._mcp_server.set_logging_level()
async def set_logging_level(level: str) -> None:
    configure_logging(name="supply_chain", level=level)


# ==============================================================================
# CREATE / UPDATE / DELETE Tools
# ==============================================================================


@mcp.tool(name="add_client")
def add_client_tool(name: str, phone: str, email: str = "") -> Client:
    """Add a new client.

    Parameters:
        name (str): Client name (at least 3 chars)
        phone (str): Contact phone (7-15 chars)
        email (str): Contact email (optional)

    Returns:
        Client with its assigned id and an empty order_ids list

    Example:
        add_client("Acme", "5551234", "orders@acme.com")
    """
    return get_service().add_client({"name": name, "phone": phone, "email": email})


@mcp.tool(name="add_supplier")
def add_supplier_tool(
    name: str,
    phone: str,
    email: str = "",
    preferred_items: Optional[List[str]] = None,
) -> Supplier:
    """Add a new supplier.

    Parameters:
        name (str): Supplier name (at least 3 chars)
        phone (str): Contact phone (7-15 chars)
        email (str): Contact email (optional)
        preferred_items (list[str]): Item types the supplier prefers to fulfill (optional)

    Returns:
        Supplier with its assigned id and an empty order_ids list
    """
    return get_service().add_supplier(
        {"name": name, "phone": phone, "email": email, "preferred_items": preferred_items or []}
    )


@mcp.tool(name="add_order")
def add_order_tool(
    title: str,
    client_id: int,
    item_types: Optional[List[str]] = None,
    products: Optional[Dict[str, int]] = None,
) -> Order:
    """Add a new draft order for an existing client.

    Parameters:
        title (str): Order title (required)
        client_id (int): Id of an existing client
        item_types (list[str]): Item type tags (optional)
        products (dict[str, int]): Product name -> quantity (optional)

    Returns:
        Order without supplier and not complete

    Note:
        Assign a supplier with add_order_supplier before completing the order.
    """
    return get_service().add_order(
        {"title": title, "client_id": client_id, "item_types": item_types or [], "products": products or {}}
    )


@mcp.tool(name="add_order_supplier")
def add_order_supplier_tool(order_id: int, supplier_id: int) -> Order:
    """Assign an existing supplier to an order."""
    return get_service().add_order_supplier(order_id, supplier_id)


@mcp.tool(name="update_order")
def update_order_tool(  # pylint: disable=too-many-arguments,too-many-positional-arguments
    order_id: int,
    title: str,
    client_id: int,
    supplier_id: Optional[int] = None,
    item_types: Optional[List[str]] = None,
    products: Optional[Dict[str, int]] = None,
) -> Order:
    """Replace an order's title, client, supplier, item types and products.

    Parameters:
        order_id (int): Order to update
        title (str): New title
        client_id (int): Id of an existing client
        supplier_id (int): Id of an existing supplier (optional, keeps the current one when omitted)
        item_types (list[str]): New item type tags
        products (dict[str, int]): New product quantities

    Note:
        The order id, creation time and completion flag never change.
    """
    return get_service().update_order(
        order_id,
        {
            "title": title,
            "client_id": client_id,
            "supplier_id": supplier_id,
            "item_types": item_types or [],
            "products": products or {},
        },
    )


@mcp.tool(name="complete_order")
def complete_order_tool(order_id: int) -> Order:
    """Mark an order complete and record it on its client and supplier.

    Fails if the order is already complete or has no supplier.
    """
    return get_service().complete_order(order_id)


@mcp.tool(name="delete_order")
def delete_order_tool(order_id: int) -> Order:
    """Delete an order and return it."""
    return get_service().delete_order(order_id)


@mcp.tool(name="rebuild_order_links")
def rebuild_order_links_tool() -> Dict[str, int]:
    """Recompute client and supplier order_ids from the completed orders."""
    return get_service().rebuild_order_links()


# ==============================================================================
# READ Tools - Order Queries
# ==============================================================================


@mcp.tool(name="get_order")
def get_order_tool(order_id: int) -> Union[Order, str]:
    """Get an order by id."""
    try:
        return get_service().get_order(order_id)
    except NotFound as e:
        return e.msg


@mcp.tool(name="get_orders")
def get_orders_tool() -> Union[List[Order], str]:
    """List every order."""
    try:
        return get_service().get_orders()
    except NotFound as e:
        return e.msg


@mcp.tool(name="get_incomplete_orders")
def get_incomplete_orders_tool() -> Union[List[Order], str]:
    """List orders that are not complete yet."""
    try:
        return get_service().get_incomplete_orders()
    except NotFound as e:
        return e.msg


@mcp.tool(name="get_completed_orders")
def get_completed_orders_tool() -> Union[List[Order], str]:
    """List completed orders."""
    try:
        return get_service().get_completed_orders()
    except NotFound as e:
        return e.msg


@mcp.tool(name="get_client_orders")
def get_client_orders_tool(client_id: int) -> Union[List[Order], str]:
    """List the orders of a client."""
    try:
        return get_service().get_client_orders(client_id)
    except NotFound as e:
        return e.msg


@mcp.tool(name="get_supplier_orders")
def get_supplier_orders_tool(supplier_id: int) -> Union[List[Order], str]:
    """List the orders assigned to a supplier."""
    try:
        return get_service().get_supplier_orders(supplier_id)
    except NotFound as e:
        return e.msg


@mcp.tool(name="get_supplier_completed_orders")
def get_supplier_completed_orders_tool(supplier_id: int) -> Union[List[Order], str]:
    """List the completed orders of a supplier."""
    try:
        return get_service().get_supplier_completed_orders(supplier_id)
    except NotFound as e:
        return e.msg


@mcp.tool(name="get_supplier_preferred_orders")
def get_supplier_preferred_orders_tool(supplier_id: int) -> Union[List[Order], str]:
    """List orders whose item types overlap the supplier's preferred items."""
    try:
        return get_service().get_supplier_preferred_orders(supplier_id)
    except NotFound as e:
        return e.msg


@mcp.tool(name="filter_orders")
def filter_orders_tool(  # pylint: disable=too-many-arguments,too-many-positional-arguments
    start_date: Optional[int] = None,
    end_date: Optional[int] = None,
    is_complete: Optional[bool] = None,
    client_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
    product: Optional[str] = None,
) -> Union[List[Order], str]:
    """Filter orders; every given criterion must match, omitted ones match everything.

    Parameters:
        start_date (int): Earliest creation time in nanoseconds (inclusive)
        end_date (int): Latest creation time in nanoseconds (inclusive)
        is_complete (bool): Completion flag
        client_id (int): Client id
        supplier_id (int): Supplier id
        product (str): Product name the order must contain
    """
    criteria = OrderFilterCriteria(
        start_date=start_date,
        end_date=end_date,
        is_complete=is_complete,
        client_id=client_id,
        supplier_id=supplier_id,
        product=product,
    )
    try:
        return get_service().filter_orders_by_criteria(criteria)
    except NotFound as e:
        return e.msg


@mcp.tool(name="suggest_suppliers")
def suggest_suppliers_tool(client_id: int) -> Union[List[Supplier], str]:
    """Suggest suppliers that completed orders with products this client orders.

    A supplier appears once per overlapping order.
    """
    try:
        return get_service().suggest_suppliers_for_client(client_id)
    except NotFound as e:
        return e.msg


@mcp.tool(name="client_engagement")
def client_engagement_tool(client_id: int) -> Union[ClientEngagement, str]:
    """Count a client's recorded orders and the distinct products among them."""
    try:
        return get_service().analyze_client_engagement(client_id)
    except NotFound as e:
        return e.msg


# ==============================================================================
# Resources - Catalog
# ==============================================================================


@mcp.resource("supply-chain://clients")
def list_clients() -> List[Client]:
    """Returns every client."""
    return get_service().list_clients()


@mcp.resource("supply-chain://suppliers")
def list_suppliers() -> List[Supplier]:
    """Returns every supplier."""
    return get_service().list_suppliers()


@mcp.resource("supply-chain://client/{client_id}")
def get_client(client_id: str) -> Union[Client, str]:
    """Get a client by id. Example: supply-chain://client/0"""
    try:
        return get_service().get_client(_parse_id(client_id, "client"))
    except NotFound as e:
        return e.msg


@mcp.resource("supply-chain://supplier/{supplier_id}")
def get_supplier(supplier_id: str) -> Union[Supplier, str]:
    """Get a supplier by id. Example: supply-chain://supplier/1"""
    try:
        return get_service().get_supplier(_parse_id(supplier_id, "supplier"))
    except NotFound as e:
        return e.msg


def main() -> None:
    logger.info("Starting Supply Chain Server")
    get_service()
    mcp.run()


if __name__ == "__main__":
    main()
