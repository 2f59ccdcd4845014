"""
notification.py — In-app notification records (the `notifications` sheet)
"""

from typing import Optional

from app.models.base import CamelModel


class Notification(CamelModel):
    id: str
    user_id: Optional[str] = None
    type: str = "system"
    title: str = ""
    message: str = ""
    read: bool = False
    created_at: str = ""
