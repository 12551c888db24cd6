"""Service facade combining the mutating operations and the queries."""

import logging
from typing import Optional

from .clock import Clock
from .config import SupplyChainConfig
from .context import AppContext
from .integrity import ReferentialIntegrity
from .queries import OrderQueries
from .storage import StableMemory


logger = logging.getLogger(__name__)


class SupplyChainService(ReferentialIntegrity, OrderQueries):
    """Every client, supplier and order operation over one AppContext.

    Usage:
        service = SupplyChainService(AppContext.from_memory(StableMemory()))
        client = service.add_client({"name": "Acme", "phone": "5551234"})
        order = service.add_order({"title": "Bolts", "client_id": client.id})
    """


def build_service(config: Optional[SupplyChainConfig] = None, clock: Optional[Clock] = None) -> SupplyChainService:
    """Wire memory, counter, stores and clock into a service.

    Args:
        config: Configuration; defaults to in-memory storage when omitted
        clock: Timestamp source; defaults to the system clock
    """
    if config is None:
        config = SupplyChainConfig(database_file=None)

    memory = StableMemory(config.database_file, max_record_size=config.max_record_size)
    logger.info("Supply chain service using %s", config.database_file or "in-memory storage")
    return SupplyChainService(AppContext.from_memory(memory, clock))
