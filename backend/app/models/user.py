"""
user.py — User Account Records

Purpose:
- Represent company / store accounts that place orders, and admins.
- Passwords live in the datastore only; they are never loaded into this model.
"""

from enum import Enum
from typing import Any, Optional

from app.models.base import CamelModel


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


# "deleted" is written by the datastore on removal; updates may only set these.
USER_STATUSES = ("active", "inactive")


class User(CamelModel):
    id: str
    role: UserRole = UserRole.USER
    company_name: str = ""
    store_name: str = ""
    email: str = ""
    phone_number: str = ""
    address: str = ""
    created_at: str = ""
    status: str = "active"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class ConnectorResult(CamelModel):
    """
    Soft result returned by user mutations in the datastore.

    `success=False` is a reported failure (e.g. unknown user), not an exception.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
