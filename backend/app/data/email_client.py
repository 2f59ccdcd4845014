"""
email_client.py — SMTP sender for admin notification mails.

Responsibilities:
- Render the notification mail (subject + HTML body with customer info)
- Deliver it to every admin address over SMTP

A missing EMAIL_USER / EMAIL_PASS means "mail disabled"; callers check
`is_configured` and skip. Delivery is sync/blocking; async callers use
`send_notification_async`, which runs it in the threadpool.
"""

from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape
from typing import Dict, Iterable, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.logging import get_logger
from app.models.notification import Notification
from app.models.user import User

logger = get_logger(__name__)


TYPE_LABELS = {
    "order": "受注",
    "user": "ユーザー",
    "schedule": "スケジュール",
    "system": "システム",
    "key_status_change": "鍵管理",
}

CUSTOMER_INFO_LABELS = (
    ("orderId", "受注ID"),
    ("propertyName", "物件名"),
    ("roomNumber", "部屋番号"),
    ("companyName", "会社名"),
    ("storeName", "店舗名"),
    ("contactPerson", "担当者"),
)


@dataclass(frozen=True)
class EmailClientSettings:
    host: str
    port: int
    use_tls: bool
    user: str
    password: str
    sender: str
    dashboard_url: str

    @classmethod
    def from_app_settings(cls) -> "EmailClientSettings":
        return cls(
            host=settings.EMAIL_HOST,
            port=settings.EMAIL_PORT,
            use_tls=settings.EMAIL_USE_TLS,
            user=settings.EMAIL_USER,
            password=settings.EMAIL_PASS,
            sender=settings.EMAIL_FROM,
            dashboard_url=settings.ADMIN_DASHBOARD_URL,
        )


def render_notification(
    notification: Notification,
    customer_info: Optional[Dict[str, str]] = None,
    dashboard_url: str = "",
) -> Tuple[str, str]:
    """Subject and HTML body for one notification mail."""
    type_label = TYPE_LABELS.get(notification.type, "お知らせ")
    info_lines = "".join(
        f"<p><strong>{label}:</strong> {escape(str(customer_info[key]))}</p>"
        for key, label in CUSTOMER_INFO_LABELS
        if customer_info and customer_info.get(key)
    )
    customer_block = f"<div><h3>顧客情報</h3>{info_lines}</div>" if info_lines else ""

    html = (
        "<html><body>"
        "<h1>工事受注システム</h1>"
        f"<div>{escape(type_label)}</div>"
        f"<h2>{escape(notification.title)}</h2>"
        f"<p>{escape(notification.message)}</p>"
        f"{customer_block}"
        f'<p><a href="{escape(dashboard_url)}">管理画面で確認する</a></p>'
        f"<p>{escape(notification.created_at)}</p>"
        "<p>この通知は工事受注システムから自動送信されています。</p>"
        "</body></html>"
    )

    return notification.title, html


class EmailClient:
    """SMTP delivery of notification mails to admin users."""

    def __init__(self, config: Optional[EmailClientSettings] = None):
        self._config = config or EmailClientSettings.from_app_settings()

    @property
    def is_configured(self) -> bool:
        return bool(self._config.user and self._config.password)

    def send_notification(
        self,
        notification: Notification,
        recipients: Iterable[User],
        customer_info: Optional[Dict[str, str]] = None,
    ) -> List[str]:
        """
        Send the notification to each recipient with an e-mail address.

        A failure for one address is logged and does not stop the others.
        Connection / login failures raise.

        Returns:
            Addresses the mail was accepted for.
        """
        addresses = []
        for user in recipients:
            if user.email:
                addresses.append(user.email)
            else:
                logger.warning("Admin %s has no e-mail address", user.id)
        if not addresses:
            logger.warning("No admin e-mail addresses; mail for %s skipped", notification.id)
            return []

        subject, html = render_notification(notification, customer_info, self._config.dashboard_url)
        delivered = []
        with smtplib.SMTP(self._config.host, self._config.port, timeout=30) as smtp:
            if self._config.use_tls:
                smtp.starttls()
            smtp.login(self._config.user, self._config.password)
            for address in addresses:
                message = EmailMessage()
                message["Subject"] = subject
                message["From"] = self._config.sender
                message["To"] = address
                message.set_content(notification.message)
                message.add_alternative(html, subtype="html")
                try:
                    smtp.send_message(message)
                    delivered.append(address)
                    logger.info("Notification mail sent to %s", address)
                except smtplib.SMTPException as exc:
                    logger.error("Notification mail to %s failed: %s", address, exc)
        return delivered

    async def send_notification_async(
        self,
        notification: Notification,
        recipients: Iterable[User],
        customer_info: Optional[Dict[str, str]] = None,
    ) -> List[str]:
        return await run_in_threadpool(self.send_notification, notification, list(recipients), customer_info)
