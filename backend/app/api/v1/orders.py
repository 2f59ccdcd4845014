"""
orders.py — Order Endpoints (API Layer)

Purpose:
- Create and list orders.
- Update the key handoff status of an order.
- Serve order lines joined with the construction item catalog, and the
  archived / with-items order views.

Endpoints:
- GET    /orders                    → every order
- POST   /orders                    → create an order
- GET    /orders/archive            → archived orders with item names + totals
- GET    /orders/with-items         → orders with item names
- GET    /orders/{order_id}/items   → order lines with their catalog entry
- PATCH  /orders/{order_id}/key-status

This API module should NOT:
- Talk to Google Sheets directly (see app.data.sheets_store).
- Build error envelopes; services raise ServiceError and main.py renders it.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import ConfigDict

from app.api.v1.responses import success_response
from app.core.dependencies import get_datastore, get_mailer
from app.core.logging import get_logger
from app.data.datastore import Datastore
from app.data.email_client import EmailClient
from app.models.base import CamelModel
from app.services import enrichment, orders

logger = get_logger(__name__)

router = APIRouter(
    prefix="/orders",
    tags=["orders"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class OrderCreateRequest(CamelModel):
    """
    Body of POST /orders. Everything is optional at the schema level; the
    validation layer reports the first missing required field.
    """
    user_id: Optional[str] = None
    property_name: Optional[str] = None
    address: Optional[str] = None
    construction_date: Optional[str] = None
    room_number: Optional[str] = None
    key_location: Optional[str] = None
    key_return: Optional[str] = None
    notes: Optional[str] = None
    contact_person: Optional[str] = None
    room_area: Optional[float] = None
    construction_items: Optional[List[Dict[str, Any]]] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "userId": "USR001",
            "propertyName": "サンプルマンション",
            "roomNumber": "101",
            "address": "東京都渋谷区1-2-3",
            "constructionDate": "2025-07-01",
            "keyLocation": "管理人室",
            "keyReturn": "ポスト返却",
            "constructionItems": [{"itemId": "ITEM001", "quantity": 1}],
        }
    })


class KeyStatusUpdateRequest(CamelModel):
    key_status: Optional[Any] = None


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.get("")
async def list_orders(datastore: Datastore = Depends(get_datastore)):
    """GET /orders"""
    return success_response(await orders.list_orders(datastore))


@router.post("")
async def create_order(body: OrderCreateRequest, datastore: Datastore = Depends(get_datastore)):
    """
    POST /orders

    Raises:
        400: a required field (userId, propertyName, address, constructionDate) is missing
        500: the order could not be stored
    """
    order = await orders.create_order(body.model_dump(by_alias=True), datastore)
    return success_response(order)


# Static paths are declared before /{order_id}/... so they are matched first
@router.get("/archive")
async def list_archived_orders(datastore: Datastore = Depends(get_datastore)):
    """GET /orders/archive"""
    return success_response(await enrichment.list_archived_orders(datastore))


@router.get("/with-items")
async def list_orders_with_items(datastore: Datastore = Depends(get_datastore)):
    """GET /orders/with-items"""
    return success_response(await enrichment.list_orders_with_items(datastore))


@router.get("/{order_id}/items")
async def get_order_items(order_id: str, datastore: Datastore = Depends(get_datastore)):
    """
    GET /orders/{order_id}/items

    Lines keep the stored order. `constructionItem` is omitted for a line
    whose item id is not in the catalog.
    """
    return success_response(await enrichment.get_order_items(order_id, datastore))


@router.patch("/{order_id}/key-status")
async def update_key_status(
    order_id: str,
    body: KeyStatusUpdateRequest,
    datastore: Datastore = Depends(get_datastore),
    mailer: EmailClient = Depends(get_mailer),
):
    """
    PATCH /orders/{order_id}/key-status   {"keyStatus": "pending" | "handed"}

    Setting "pending" (key arrived at the office) also notifies the admins.
    A failed notification does not fail the request.

    Raises:
        400: keyStatus is not "pending" or "handed"
        500: the update could not be stored
    """
    logger.info("Key status update requested for order %s: %r", order_id, body.key_status)
    order = await orders.update_key_status(order_id, body.key_status, datastore, mailer)
    return success_response(order)
