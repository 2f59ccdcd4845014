"""
datastore.py — Datastore Connector Contract

Purpose:
- Describe the row-level accessor operations the services depend on.
- Keep services independent of the concrete backend (Google Sheets in
  production, in-memory fakes in tests).

All operations are coroutines. Implementations:
- raise on transport / storage failure (services turn that into a 500),
- raise RecordNotFoundError when update_order gets an unknown id,
- report user mutations as ConnectorResult instead of raising for
  "soft" failures such as an unknown user id.
"""

from typing import Any, Dict, List, Optional, Protocol

from app.models.construction_item import ConstructionItem, OrderItem
from app.models.notification import Notification
from app.models.order import ArchivedOrder, NewOrder, Order
from app.models.user import ConnectorResult, User


class RecordNotFoundError(LookupError):
    """Raised when a row addressed by id does not exist."""


class Datastore(Protocol):

    # Orders
    async def get_orders(self) -> List[Order]: ...

    async def add_order(self, order: NewOrder) -> Order: ...

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Order: ...

    async def get_archived_orders(self) -> List[ArchivedOrder]: ...

    # Catalog / order lines
    async def get_construction_items(self) -> List[ConstructionItem]: ...

    async def get_order_items(self, order_id: str) -> List[OrderItem]: ...

    async def get_all_order_items(self) -> List[OrderItem]: ...

    # Users
    async def get_users(self) -> List[User]: ...

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> ConnectorResult: ...

    async def delete_user(self, user_id: str) -> ConnectorResult: ...

    # Aggregates / notifications
    async def get_statistics(self) -> Dict[str, Any]: ...

    async def add_notification(
        self,
        type: str,
        title: str,
        message: str,
        user_id: Optional[str] = None,
    ) -> Notification: ...
