"""
notifications.py — Key Arrival Notification

Purpose:
- Record an in-app notification when an order's key reaches the office.
- Mail the same notification to every active admin user.

Mailing is optional: without SMTP credentials the notification row is still
written and the mail step is skipped with a warning. The mail is also skipped
when the order or its owner cannot be found.
"""

from typing import Dict, List

from app.core.logging import get_logger
from app.data.datastore import Datastore
from app.data.email_client import EmailClient
from app.models.order import Order
from app.models.user import User
from app.services.errors import NotificationError

logger = get_logger(__name__)

KEY_ARRIVAL_TYPE = "order"
KEY_ARRIVAL_TITLE = "鍵が到着しました"


def key_arrival_message(order_id: str, property_name: str) -> str:
    return f"{property_name}（受注ID: {order_id}）の鍵が到着済みになりました"


def customer_info_for(order: Order, owner: User) -> Dict[str, str]:
    return {
        "orderId": order.id,
        "propertyName": order.property_name,
        "roomNumber": order.room_number,
        "contactPerson": order.contact_person,
        "companyName": owner.company_name,
        "storeName": owner.store_name,
    }


async def send_key_arrival_notification(
    order_id: str,
    property_name: str,
    datastore: Datastore,
    mailer: EmailClient,
) -> List[str]:
    """
    Record and mail the "key arrived" notification for one order.

    Returns:
        Admin addresses the mail was delivered to (empty when mail is off or
        the order or its owner is unknown).

    Raises:
        NotificationError: any step failed.
    """
    try:
        notification = await datastore.add_notification(
            type=KEY_ARRIVAL_TYPE,
            title=KEY_ARRIVAL_TITLE,
            message=key_arrival_message(order_id, property_name),
        )

        if not mailer.is_configured:
            logger.warning("Mail is not configured; key arrival mail for %s skipped", order_id)
            return []

        orders = await datastore.get_orders()
        order = next((o for o in orders if o.id == order_id), None)
        users = await datastore.get_users()
        owner = next((u for u in users if order and u.id == order.user_id), None)
        if order is None or owner is None:
            logger.warning("Order %s or its owner not found; key arrival mail skipped", order_id)
            return []

        admins = [u for u in users if u.is_admin and u.is_active]
        delivered = await mailer.send_notification_async(
            notification,
            admins,
            customer_info_for(order, owner),
        )
    except Exception as exc:
        raise NotificationError(f"Key arrival notification for {order_id} failed: {exc}") from exc

    logger.info("Key arrival mail for %s sent to %d admin(s)", order_id, len(delivered))
    return delivered
