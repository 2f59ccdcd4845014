"""
enrichment.py — Order / Catalog Joins

Purpose:
- Attach the catalog entry (construction item) to each order line.
- Serve the catalog filtered to active entries.
- Build the order views that list item names (and, for archived orders,
  the billed total).

Join rules:
- Matching is by exact id; the first catalog entry with that id wins.
- Order lines are returned in the order the datastore gives them.
- A line whose item is missing from the catalog is kept, without enrichment.
- Inactive catalog entries still enrich existing order lines.
"""

from typing import Dict, Iterable, List

from app.core.logging import get_logger
from app.data.datastore import Datastore
from app.models.construction_item import ConstructionItem, EnrichedOrderItem, OrderItem
from app.models.order import ArchivedOrder, OrderWithServices
from app.services.errors import FETCH_FAILED_MESSAGE, PersistenceError

logger = get_logger(__name__)


def catalog_index(catalog: Iterable[ConstructionItem]) -> Dict[str, ConstructionItem]:
    index: Dict[str, ConstructionItem] = {}
    for item in catalog:
        index.setdefault(item.id, item)
    return index


def enrich_items(items: Iterable[OrderItem], catalog: Iterable[ConstructionItem]) -> List[EnrichedOrderItem]:
    index = catalog_index(catalog)
    return [
        EnrichedOrderItem(**item.model_dump(), construction_item=index.get(item.item_id))
        for item in items
    ]


def service_names(items: Iterable[OrderItem], index: Dict[str, ConstructionItem]) -> List[str]:
    names = []
    for item in items:
        master = index.get(item.item_id)
        names.append(master.name if master else f"未知の項目 ({item.item_id})")
    return names


def _group_by_order(items: Iterable[OrderItem]) -> Dict[str, List[OrderItem]]:
    grouped: Dict[str, List[OrderItem]] = {}
    for item in items:
        grouped.setdefault(item.order_id, []).append(item)
    return grouped


async def get_order_items(order_id: str, datastore: Datastore) -> List[EnrichedOrderItem]:
    """Order lines of one order, each with its catalog entry when one exists."""
    try:
        items = await datastore.get_order_items(order_id)
        catalog = await datastore.get_construction_items()
    except Exception as exc:
        logger.exception("Failed to fetch items of order %s", order_id)
        raise PersistenceError(FETCH_FAILED_MESSAGE) from exc
    return enrich_items(items, catalog)


async def list_active_construction_items(datastore: Datastore) -> List[ConstructionItem]:
    try:
        catalog = await datastore.get_construction_items()
    except Exception as exc:
        logger.exception("Failed to fetch construction items")
        raise PersistenceError(FETCH_FAILED_MESSAGE) from exc
    return [item for item in catalog if item.active is True]


async def list_orders_with_items(datastore: Datastore) -> List[OrderWithServices]:
    try:
        orders = await datastore.get_orders()
        items = await datastore.get_all_order_items()
        catalog = await datastore.get_construction_items()
    except Exception as exc:
        logger.exception("Failed to fetch orders with items")
        raise PersistenceError(FETCH_FAILED_MESSAGE) from exc

    index = catalog_index(catalog)
    grouped = _group_by_order(items)
    return [
        OrderWithServices(**order.model_dump(), services=service_names(grouped.get(order.id, []), index))
        for order in orders
    ]


async def list_archived_orders(datastore: Datastore) -> List[ArchivedOrder]:
    """Archived orders with item names and total_amount = Σ quantity × price."""
    try:
        archived = await datastore.get_archived_orders()
        items = await datastore.get_all_order_items()
        catalog = await datastore.get_construction_items()
    except Exception as exc:
        logger.exception("Failed to fetch archived orders")
        raise PersistenceError(FETCH_FAILED_MESSAGE) from exc

    index = catalog_index(catalog)
    grouped = _group_by_order(items)
    results = []
    for order in archived:
        lines = grouped.get(order.id, [])
        results.append(order.model_copy(update={
            "services": service_names(lines, index),
            "total_amount": sum(line.quantity * line.price for line in lines),
        }))
    return results
