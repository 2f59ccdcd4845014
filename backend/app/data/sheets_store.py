"""
sheets_store.py — Google Sheets implementation of the Datastore contract

Purpose:
- Map spreadsheet rows (snake_case header columns) to domain records.
- Generate sequential ids (`ORD001`, `NOT001`, ...) the way the sheet
  operators expect them.
- Compute the statistics summary served by GET /statistics.

Sheets used:
    users, orders, orders_archive, order_items, construction_items, notifications

Key Characteristics:
- Every call re-reads the sheet it needs; nothing is cached here.
- Blocking HTTP work runs in the threadpool so the async API stays responsive.
- Single-row writes only. Two concurrent updates of one order are last-write-wins.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from fastapi.concurrency import run_in_threadpool

from app.core.logging import get_logger
from app.data.datastore import RecordNotFoundError
from app.data.sheets_client import SheetRow, SheetsClient, SheetTable
from app.models.construction_item import ConstructionItem, OrderItem, PriceOption
from app.models.notification import Notification
from app.models.order import (
    DEFAULT_ORDER_STATUS,
    ArchivedOrder,
    KeyStatus,
    NewOrder,
    Order,
    OrderItemSelection,
)
from app.models.user import ConnectorResult, User, UserRole

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# Sheet / column layout
# -----------------------------------------------------------------------------

SHEET_USERS = "users"
SHEET_ORDERS = "orders"
SHEET_ORDERS_ARCHIVE = "orders_archive"
SHEET_ORDER_ITEMS = "order_items"
SHEET_CONSTRUCTION_ITEMS = "construction_items"
SHEET_NOTIFICATIONS = "notifications"

# Order attributes are stored under columns of the same name
ORDER_COLUMNS = tuple(Order.model_fields)
USER_UPDATABLE_COLUMNS = (
    "company_name",
    "store_name",
    "email",
    "phone_number",
    "address",
    "role",
    "status",
)

USER_NOT_FOUND_MESSAGE = "ユーザーが見つかりません"


# -----------------------------------------------------------------------------
# Row helpers
# -----------------------------------------------------------------------------

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_boolean(value: str) -> bool:
    """Sheets hold TRUE / true / 1 / yes for checked cells."""
    return str(value or "").strip().lower() in ("true", "1", "yes")


def next_sequential_id(existing_ids: Iterable[str], prefix: str, min_digits: int = 3) -> str:
    """
    Next id after the highest numeric suffix among `existing_ids`.

    Example:
        next_sequential_id(["ORD001", "ORD009", "X1"], "ORD") → "ORD010"
    """
    numbers = [
        int(value[len(prefix):])
        for value in existing_ids
        if value and value.startswith(prefix) and value[len(prefix):].isdigit()
    ]
    return f"{prefix}{str(max(numbers, default=0) + 1).zfill(min_digits)}"


def _to_float(value: str) -> Optional[float]:
    try:
        return float(value) if value else None
    except ValueError:
        return None


def _to_int(value: str, default: int) -> int:
    try:
        return int(float(value)) if value else default
    except ValueError:
        return default


def _key_status(value: str, default: KeyStatus) -> KeyStatus:
    try:
        return KeyStatus(value) if value else default
    except ValueError:
        logger.warning("Unknown key_status %r in sheet, using %s", value, default.value)
        return default


def _cell_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def order_from_row(row: SheetRow, default_key_status: KeyStatus = KeyStatus.HANDED) -> Dict[str, Any]:
    return {
        "id": row.get("id"),
        "user_id": row.get("user_id"),
        "contact_person": row.get("contact_person"),
        "order_date": row.get("order_date"),
        "construction_date": row.get("construction_date"),
        "property_name": row.get("property_name"),
        "room_number": row.get("room_number"),
        "address": row.get("address"),
        "room_area": _to_float(row.get("room_area")),
        "key_location": row.get("key_location"),
        "key_return": row.get("key_return"),
        "key_status": _key_status(row.get("key_status"), default_key_status),
        "status": row.get("status", DEFAULT_ORDER_STATUS),
        "notes": row.get("notes"),
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }


def construction_item_from_row(row: SheetRow) -> ConstructionItem:
    has_area_selection = normalize_boolean(row.get("has_area_selection"))
    price_options = None
    if has_area_selection and row.get("price_options").strip():
        try:
            price_options = [PriceOption(**option) for option in json.loads(row.get("price_options"))]
        except (ValueError, TypeError) as exc:
            logger.warning("Could not parse price_options for item %s: %s", row.get("id"), exc)

    return ConstructionItem(
        id=row.get("id"),
        name=row.get("name"),
        price=_to_int(row.get("price"), 0),
        active=normalize_boolean(row.get("active")),
        created_at=row.get("created_at"),
        has_quantity=normalize_boolean(row.get("has_quantity")),
        has_area_selection=has_area_selection,
        price_options=price_options,
    )


def order_item_from_row(row: SheetRow) -> OrderItem:
    return OrderItem(
        id=row.get("id"),
        order_id=row.get("order_id"),
        item_id=row.get("item_id"),
        quantity=_to_int(row.get("quantity"), 1),
        price=_to_float(row.get("price")) or 0,
        selected_area_option=row.get("selected_area_option") or None,
        created_at=row.get("created_at"),
    )


def user_from_row(row: SheetRow) -> User:
    return User(
        id=row.get("id"),
        role=UserRole.ADMIN if row.get("role") == UserRole.ADMIN.value else UserRole.USER,
        company_name=row.get("company_name"),
        store_name=row.get("store_name"),
        email=row.get("email"),
        phone_number=row.get("phone_number"),
        address=row.get("address"),
        created_at=row.get("created_at"),
        status=row.get("status", "active"),
    )


def _find_row(table: SheetTable, record_id: str) -> Optional[SheetRow]:
    return next((row for row in table.rows if row.get("id") == record_id), None)


# -----------------------------------------------------------------------------
# Datastore
# -----------------------------------------------------------------------------

class SheetsDatastore:
    """Datastore backed by one Google spreadsheet."""

    def __init__(self, client: SheetsClient):
        self._client = client

    # ------------------------------------------------------------------ #
    # Async API (Datastore contract)
    # ------------------------------------------------------------------ #

    async def get_orders(self) -> List[Order]:
        return await run_in_threadpool(self._get_orders)

    async def add_order(self, order: NewOrder) -> Order:
        return await run_in_threadpool(self._add_order, order)

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Order:
        return await run_in_threadpool(self._update_order, order_id, fields)

    async def get_archived_orders(self) -> List[ArchivedOrder]:
        return await run_in_threadpool(self._get_archived_orders)

    async def get_construction_items(self) -> List[ConstructionItem]:
        return await run_in_threadpool(self._get_construction_items)

    async def get_order_items(self, order_id: str) -> List[OrderItem]:
        return await run_in_threadpool(self._get_order_items, order_id)

    async def get_all_order_items(self) -> List[OrderItem]:
        return await run_in_threadpool(self._get_all_order_items)

    async def get_users(self) -> List[User]:
        return await run_in_threadpool(self._get_users)

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> ConnectorResult:
        return await run_in_threadpool(self._update_user, user_id, fields)

    async def delete_user(self, user_id: str) -> ConnectorResult:
        return await run_in_threadpool(self._delete_user, user_id)

    async def get_statistics(self) -> Dict[str, Any]:
        return await run_in_threadpool(self._get_statistics)

    async def add_notification(
        self,
        type: str,
        title: str,
        message: str,
        user_id: Optional[str] = None,
    ) -> Notification:
        return await run_in_threadpool(self._add_notification, type, title, message, user_id)

    # ------------------------------------------------------------------ #
    # Orders
    # ------------------------------------------------------------------ #

    def _get_orders(self) -> List[Order]:
        table = self._client.read_table(SHEET_ORDERS)
        return [Order(**order_from_row(row)) for row in table.rows]

    def _add_order(self, order: NewOrder) -> Order:
        table = self._client.read_table(SHEET_ORDERS)
        order_id = next_sequential_id((row.get("id") for row in table.rows), "ORD")
        timestamp = now_iso()

        record = Order(
            id=order_id,
            user_id=order.user_id,
            contact_person=order.contact_person,
            order_date=timestamp[:10],
            construction_date=order.construction_date,
            property_name=order.property_name,
            room_number=order.room_number,
            address=order.address,
            room_area=order.room_area,
            key_location=order.key_location,
            key_return=order.key_return,
            key_status=KeyStatus.HANDED,
            status=DEFAULT_ORDER_STATUS,
            notes=order.notes,
            created_at=timestamp,
            updated_at=timestamp,
        )
        values = {column: _cell_value(value) for column, value in record.model_dump().items()}
        self._client.append_row(table, values)
        logger.info("Added order %s for user %s", order_id, order.user_id)

        if order.construction_items:
            self._add_order_items(order_id, order.construction_items)
        return record

    def _add_order_items(self, order_id: str, selections: List[OrderItemSelection]) -> None:
        table = self._client.read_table(SHEET_ORDER_ITEMS)
        catalog = self._get_construction_items()
        timestamp = now_iso()

        for position, selection in enumerate(selections, start=1):
            master = next((item for item in catalog if item.id == selection.item_id), None)
            price = master.price_for(selection.selected_area_option) if master else 0
            self._client.append_row(table, {
                "id": f"{order_id}_{selection.item_id}_{position}",
                "order_id": order_id,
                "item_id": selection.item_id,
                "quantity": selection.quantity,
                "price": price,
                "selected_area_option": selection.selected_area_option or "",
                "price_override": "",
                "created_at": timestamp,
            })
        logger.info("Added %d order items for %s", len(selections), order_id)

    def _update_order(self, order_id: str, fields: Dict[str, Any]) -> Order:
        table = self._client.read_table(SHEET_ORDERS)
        row = _find_row(table, order_id)
        if row is None:
            raise RecordNotFoundError(f"Order {order_id} not found")

        for column, value in fields.items():
            if column not in ORDER_COLUMNS or column == "id":
                logger.warning("Ignoring unknown order column %r", column)
                continue
            row.set(column, _cell_value(value))
        row.set("updated_at", now_iso())

        self._client.update_row(table, row)
        logger.info("Updated order %s: %s", order_id, sorted(fields))
        return Order(**order_from_row(row))

    def _get_archived_orders(self) -> List[ArchivedOrder]:
        table = self._client.read_table(SHEET_ORDERS_ARCHIVE)
        return [
            ArchivedOrder(
                **order_from_row(row, default_key_status=KeyStatus.PENDING),
                archived_at=row.get("archived_at"),
            )
            for row in table.rows
        ]

    # ------------------------------------------------------------------ #
    # Catalog / order lines
    # ------------------------------------------------------------------ #

    def _get_construction_items(self) -> List[ConstructionItem]:
        table = self._client.read_table(SHEET_CONSTRUCTION_ITEMS)
        return [construction_item_from_row(row) for row in table.rows]

    def _get_order_items(self, order_id: str) -> List[OrderItem]:
        return [item for item in self._get_all_order_items() if item.order_id == order_id]

    def _get_all_order_items(self) -> List[OrderItem]:
        table = self._client.read_table(SHEET_ORDER_ITEMS)
        return [order_item_from_row(row) for row in table.rows]

    # ------------------------------------------------------------------ #
    # Users
    # ------------------------------------------------------------------ #

    def _get_users(self) -> List[User]:
        table = self._client.read_table(SHEET_USERS)
        return [user_from_row(row) for row in table.rows]

    def _update_user(self, user_id: str, fields: Dict[str, Any]) -> ConnectorResult:
        table = self._client.read_table(SHEET_USERS)
        row = _find_row(table, user_id)
        if row is None:
            return ConnectorResult(success=False, error=USER_NOT_FOUND_MESSAGE)

        for column in USER_UPDATABLE_COLUMNS:
            if column in fields:
                row.set(column, _cell_value(fields[column]))
        row.set("updated_at", now_iso())
        self._client.update_row(table, row)

        logger.info("Updated user %s", user_id)
        return ConnectorResult(success=True, data=user_from_row(row))

    def _delete_user(self, user_id: str) -> ConnectorResult:
        table = self._client.read_table(SHEET_USERS)
        row = _find_row(table, user_id)
        if row is None:
            return ConnectorResult(success=False, error=USER_NOT_FOUND_MESSAGE)

        # The row stays for order history; the account is marked deleted
        row.set("status", "deleted")
        row.set("updated_at", now_iso())
        self._client.update_row(table, row)

        logger.info("Deleted user %s", user_id)
        return ConnectorResult(success=True)

    # ------------------------------------------------------------------ #
    # Aggregates / notifications
    # ------------------------------------------------------------------ #

    def _get_statistics(self) -> Dict[str, Any]:
        orders = self._get_orders()
        users = self._get_users()
        current_month = now_iso()[:7]  # YYYY-MM

        status_breakdown: Dict[str, int] = {}
        for order in orders:
            status_breakdown[order.status] = status_breakdown.get(order.status, 0) + 1

        return {
            "totalOrders": len(orders),
            "monthlyOrders": sum(1 for order in orders if order.order_date.startswith(current_month)),
            "totalUsers": len(users),
            "statusBreakdown": status_breakdown,
            "pendingOrders": status_breakdown.get(DEFAULT_ORDER_STATUS, 0),
        }

    def _add_notification(
        self,
        type: str,
        title: str,
        message: str,
        user_id: Optional[str] = None,
    ) -> Notification:
        table = self._client.read_table(SHEET_NOTIFICATIONS)
        notification = Notification(
            id=next_sequential_id((row.get("id") for row in table.rows), "NOT"),
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            read=False,
            created_at=now_iso(),
        )
        self._client.append_row(table, notification.model_dump())
        logger.info("Added notification %s (%s)", notification.id, title)
        return notification
