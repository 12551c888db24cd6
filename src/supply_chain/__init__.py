"""Client, supplier and order registry with referential integrity."""

from .clock import (
    Clock,
    SystemClock,
)
from .config import (
    SupplyChainConfig,
    load_config,
)
from .context import AppContext
from .errors import (
    AlreadyCompleted,
    InvalidPayload,
    NotFound,
    StorageFault,
    SupplyChainError,
)
from .models import (
    Client,
    ClientEngagement,
    ClientPayload,
    Order,
    OrderFilterCriteria,
    OrderPayload,
    Supplier,
    SupplierPayload,
)
from .service import (
    SupplyChainService,
    build_service,
)
from .storage import (
    MAX_RECORD_SIZE,
    EntityStore,
    IdCounter,
    StableMemory,
)


__all__ = [
    "MAX_RECORD_SIZE",
    "AlreadyCompleted",
    "AppContext",
    "Client",
    "ClientEngagement",
    "ClientPayload",
    "Clock",
    "EntityStore",
    "IdCounter",
    "InvalidPayload",
    "NotFound",
    "Order",
    "OrderFilterCriteria",
    "OrderPayload",
    "StableMemory",
    "StorageFault",
    "Supplier",
    "SupplierPayload",
    "SupplyChainConfig",
    "SupplyChainError",
    "SupplyChainService",
    "SystemClock",
    "build_service",
    "load_config",
]
