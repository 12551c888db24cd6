"""Entity, payload and result models for clients, suppliers and orders."""

from typing import (
    Dict,
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    Field,
    NonNegativeInt,
    field_validator,
)


NAME_MIN_LENGTH = 3
PHONE_MIN_LENGTH = 7
PHONE_MAX_LENGTH = 15
TITLE_MIN_LENGTH = 1


def _dedupe(values: List[str]) -> List[str]:
    """Collapse duplicates, keeping the order of first occurrence."""
    return list(dict.fromkeys(values))


# ==============================================================================
# Entities
# ==============================================================================


class Client(BaseModel):
    """Client entity."""

    id: NonNegativeInt = Field(..., description="Client identifier")
    name: str = Field(..., description="Client name")
    email: str = Field(default="", description="Contact email")
    phone: str = Field(..., description="Contact phone")
    order_ids: List[NonNegativeInt] = Field(
        default_factory=list, description="Ids of completed orders recorded for this client (derived cache)"
    )
    created_at: NonNegativeInt = Field(..., description="Creation timestamp (ns)")
    updated_at: Optional[NonNegativeInt] = Field(None, description="Last update timestamp (ns)")


class Supplier(BaseModel):
    """Supplier entity."""

    id: NonNegativeInt = Field(..., description="Supplier identifier")
    name: str = Field(..., description="Supplier name")
    email: str = Field(default="", description="Contact email")
    phone: str = Field(..., description="Contact phone")
    preferred_items: List[str] = Field(default_factory=list, description="Item types the supplier prefers to fulfill")
    order_ids: List[NonNegativeInt] = Field(
        default_factory=list, description="Ids of completed orders recorded for this supplier (derived cache)"
    )
    created_at: NonNegativeInt = Field(..., description="Creation timestamp (ns)")
    updated_at: Optional[NonNegativeInt] = Field(None, description="Last update timestamp (ns)")


class Order(BaseModel):
    """Order entity.

    ``client_id`` and ``supplier_id`` are the authoritative relationship; the
    ``order_ids`` lists on clients and suppliers only cache completed orders.
    """

    id: NonNegativeInt = Field(..., description="Order identifier")
    title: str = Field(..., description="Order title")
    client_id: NonNegativeInt = Field(..., description="Client identifier (foreign key)")
    supplier_id: Optional[NonNegativeInt] = Field(None, description="Supplier identifier (foreign key)")
    item_types: List[str] = Field(default_factory=list, description="Item type tags")
    products: Dict[str, NonNegativeInt] = Field(default_factory=dict, description="Product name -> quantity")
    is_complete: bool = Field(default=False, description="Completion flag")
    created_at: NonNegativeInt = Field(..., description="Creation timestamp (ns)")
    updated_at: Optional[NonNegativeInt] = Field(None, description="Last update timestamp (ns)")


# ==============================================================================
# Payloads
# ==============================================================================


class ClientPayload(BaseModel):
    """Inbound data for creating a client."""

    name: str = Field(..., min_length=NAME_MIN_LENGTH, description="Client name")
    email: str = Field(default="", description="Contact email")
    phone: str = Field(..., min_length=PHONE_MIN_LENGTH, max_length=PHONE_MAX_LENGTH, description="Contact phone")


class SupplierPayload(BaseModel):
    """Inbound data for creating a supplier."""

    name: str = Field(..., min_length=NAME_MIN_LENGTH, description="Supplier name")
    email: str = Field(default="", description="Contact email")
    phone: str = Field(..., min_length=PHONE_MIN_LENGTH, max_length=PHONE_MAX_LENGTH, description="Contact phone")
    preferred_items: List[str] = Field(default_factory=list, description="Preferred item types")

    @field_validator("preferred_items")
    @classmethod
    def dedupe_preferred_items(cls, value: List[str]) -> List[str]:
        """Preferred items behave like a set."""
        return _dedupe(value)


class OrderPayload(BaseModel):
    """Inbound data for creating or replacing an order.

    ``supplier_id`` is ignored on creation; suppliers are assigned through
    ``add_order_supplier`` or ``update_order``.
    """

    title: str = Field(..., min_length=TITLE_MIN_LENGTH, description="Order title")
    client_id: NonNegativeInt = Field(..., description="Client identifier")
    supplier_id: Optional[NonNegativeInt] = Field(None, description="Supplier identifier")
    item_types: List[str] = Field(default_factory=list, description="Item type tags")
    products: Dict[str, NonNegativeInt] = Field(default_factory=dict, description="Product name -> quantity")


class OrderFilterCriteria(BaseModel):
    """Conjunctive order filter. Unset fields match everything."""

    start_date: Optional[NonNegativeInt] = Field(None, description="Earliest created_at (inclusive)")
    end_date: Optional[NonNegativeInt] = Field(None, description="Latest created_at (inclusive)")
    is_complete: Optional[bool] = Field(None, description="Completion flag")
    client_id: Optional[NonNegativeInt] = Field(None, description="Client identifier")
    supplier_id: Optional[NonNegativeInt] = Field(None, description="Supplier identifier")
    product: Optional[str] = Field(None, description="Product name that must appear in the order")


# ==============================================================================
# Results
# ==============================================================================


class ClientEngagement(BaseModel):
    """Summary of a client's recorded orders."""

    client_id: int
    total_orders: int
    distinct_products: int
