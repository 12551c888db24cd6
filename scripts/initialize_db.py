#!/usr/bin/env python3
"""Initialize a supply chain database file with sample data.

Creates sample clients, suppliers and orders, assigns suppliers, and completes
some of the orders so that the client and supplier order links are populated.

Usage:
    python scripts/initialize_db.py [output_file]

Arguments:
    output_file: Path to save the database (default: supply_chain.pkl)
"""

import sys
from pathlib import Path

from supply_chain import (
    SupplyChainConfig,
    SupplyChainService,
    build_service,
)


def initialize_sample_database(output_file: str = "supply_chain.pkl") -> SupplyChainService:
    """Populate a fresh database file with sample data.

    Args:
        output_file: Path of the database file; an existing file is replaced

    Returns:
        SupplyChainService backed by the new file
    """
    path = Path(output_file)
    if path.exists():
        path.unlink()

    service = build_service(SupplyChainConfig(database_file=output_file))

    print("Initializing sample supply chain database...")
    print()

    print("Creating clients...")
    clients_data = [
        {"name": "Acme Manufacturing", "email": "purchasing@acme.com", "phone": "5551234"},
        {"name": "Riverside Builders", "email": "office@riverside.com", "phone": "+15550198765"},
        {"name": "Northwind Garage", "email": "parts@northwind.com", "phone": "5550456"},
    ]
    clients = [service.add_client(data) for data in clients_data]
    for client in clients:
        print(f"  Added client: {client.id} - {client.name}")
    print()

    print("Creating suppliers...")
    suppliers_data = [
        {"name": "Bolt & Nut Co.", "phone": "5550100", "preferred_items": ["fasteners", "hardware"]},
        {"name": "TimberWorks", "phone": "5550200", "preferred_items": ["lumber"]},
        {"name": "AutoParts Direct", "phone": "5550300", "preferred_items": ["automotive", "hardware"]},
    ]
    suppliers = [service.add_supplier(data) for data in suppliers_data]
    for supplier in suppliers:
        print(f"  Added supplier: {supplier.id} - {supplier.name}")
    print()

    print("Creating orders...")
    # (client index, supplier index or None, complete?, payload)
    orders_data = [
        (0, 0, True, {"title": "Assembly line restock", "item_types": ["fasteners"], "products": {"bolts": 500}}),
        (0, 2, False, {"title": "Maintenance kit", "item_types": ["hardware"], "products": {"bolts": 20}}),
        (1, 1, True, {"title": "Deck frame", "item_types": ["lumber"], "products": {"2x4 boards": 120}}),
        (1, 0, True, {"title": "Deck fixings", "item_types": ["fasteners"], "products": {"screws": 2000}}),
        (2, 2, True, {"title": "Brake service", "item_types": ["automotive"], "products": {"brake pads": 8}}),
        (2, None, False, {"title": "Tyre rotation", "item_types": ["automotive"], "products": {"lug nuts": 40}}),
    ]
    for client_index, supplier_index, complete, data in orders_data:
        order = service.add_order({**data, "client_id": clients[client_index].id})
        if supplier_index is not None:
            service.add_order_supplier(order.id, suppliers[supplier_index].id)
        if complete:
            order = service.complete_order(order.id)
        print(f"  Added order: {order.id} - {order.title} ({'complete' if order.is_complete else 'open'})")
    print()

    print(f"Database saved to {output_file}")
    return service


if __name__ == "__main__":
    initialize_sample_database(sys.argv[1] if len(sys.argv) > 1 else "supply_chain.pkl")
