"""
order.py — Order Records

Purpose:
- Represent a scheduled service job (one property / room to be worked on).
- Track physical key custody through `key_status`.

Key Points:
- `id` is assigned by the datastore when the order is created.
- `key_status` is two-valued; the datastore decides the initial value.
- Orders are never deleted here. Archiving moves them to a separate sheet,
  which is done outside this backend.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from app.models.base import CamelModel


class KeyStatus(str, Enum):
    PENDING = "pending"  # key is at the office, waiting to be handed over
    HANDED = "handed"


DEFAULT_ORDER_STATUS = "日程待ち"


class OrderItemSelection(CamelModel):
    """One construction item picked on the order form."""
    item_id: str
    quantity: int = 1
    selected_area_option: Optional[str] = None


class NewOrder(CamelModel):
    """Validated payload for order creation; optional text fields are already defaulted."""
    user_id: str
    property_name: str
    address: str
    construction_date: str
    room_number: str = ""
    key_location: str = ""
    key_return: str = ""
    notes: str = ""
    contact_person: str = ""
    room_area: Optional[float] = None
    construction_items: List[OrderItemSelection] = Field(default_factory=list)


class Order(CamelModel):
    id: str
    user_id: str = ""
    contact_person: str = ""
    order_date: str = ""
    construction_date: str = ""
    property_name: str = ""
    room_number: str = ""
    address: str = ""
    room_area: Optional[float] = None
    key_location: str = ""
    key_return: str = ""
    key_status: KeyStatus = KeyStatus.HANDED
    status: str = DEFAULT_ORDER_STATUS
    notes: str = ""
    created_at: str = ""
    updated_at: str = ""


class OrderWithServices(Order):
    services: List[str] = Field(default_factory=list)


class ArchivedOrder(OrderWithServices):
    archived_at: str = ""
    total_amount: float = 0
