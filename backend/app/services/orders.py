"""
orders.py — Order Lifecycle

Purpose:
- Create orders and list them.
- Move an order's key between "pending" and "handed", and announce a key
  arriving at the office once that change is stored.

Key Points:
- Input is validated before the datastore is touched.
- The datastore's answer is authoritative; the updated order it returns is
  what the caller gets back.
- The key arrival notification runs after the write has succeeded. Its
  failure is logged and never changes the result of the update.

This module does NOT:
- Delete or archive orders.
- Retry failed datastore calls.
"""

from typing import Any, List, Mapping

from app.core.logging import get_logger
from app.data.datastore import Datastore
from app.data.email_client import EmailClient
from app.models.order import KeyStatus, Order
from app.services.errors import FETCH_FAILED_MESSAGE, PersistenceError
from app.services.notifications import send_key_arrival_notification
from app.services.validation import validate_key_status, validate_new_order

logger = get_logger(__name__)

CREATE_FAILED_MESSAGE = "受注の作成に失敗しました"
KEY_STATUS_UPDATE_FAILED_MESSAGE = "鍵ステータスの更新に失敗しました"


async def list_orders(datastore: Datastore) -> List[Order]:
    try:
        return await datastore.get_orders()
    except Exception as exc:
        logger.exception("Failed to fetch orders")
        raise PersistenceError(FETCH_FAILED_MESSAGE) from exc


async def create_order(payload: Mapping[str, Any], datastore: Datastore) -> Order:
    """
    Validate a create-order payload and persist it.

    Raises:
        ValidationError: a required field is missing (no datastore call made)
        PersistenceError: the datastore rejected or failed the write
    """
    new_order = validate_new_order(payload)

    try:
        order = await datastore.add_order(new_order)
    except Exception as exc:
        logger.exception("Failed to create order for user %s", new_order.user_id)
        raise PersistenceError(CREATE_FAILED_MESSAGE) from exc

    logger.info("Created order %s (%s)", order.id, order.property_name)
    return order


async def update_key_status(
    order_id: str,
    key_status: Any,
    datastore: Datastore,
    mailer: EmailClient,
) -> Order:
    """
    Set the key status of one order.

    Flow:
    1. Reject anything other than "pending" / "handed" (400, nothing stored).
    2. Store the new status. Any datastore failure, an unknown order id
       included, becomes a PersistenceError (500).
    3. When the new status is "pending", send the key arrival notification.
       Errors from this step are logged and dropped.
    """
    status = validate_key_status(key_status)

    try:
        order = await datastore.update_order(order_id, {"key_status": status.value})
    except Exception as exc:
        logger.exception("Failed to update key status of order %s", order_id)
        raise PersistenceError(KEY_STATUS_UPDATE_FAILED_MESSAGE) from exc

    logger.info("Order %s key status set to %s", order_id, status.value)

    if status is KeyStatus.PENDING:
        try:
            await send_key_arrival_notification(order_id, order.property_name, datastore, mailer)
        except Exception:
            logger.exception("Key arrival notification for order %s failed", order_id)

    return order
