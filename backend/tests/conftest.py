"""
Shared fixtures: an in-memory datastore and mailer, and a TestClient wired to them.

FakeDatastore records every call in `calls` so tests can assert that
validation failures never reach the datastore.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_datastore, get_mailer
from app.data.datastore import RecordNotFoundError
from app.data.sheets_store import next_sequential_id
from app.main import app
from app.models.construction_item import ConstructionItem, OrderItem, PriceOption
from app.models.notification import Notification
from app.models.order import ArchivedOrder, KeyStatus, NewOrder, Order
from app.models.user import ConnectorResult, User, UserRole


class FakeDatastore:
    def __init__(self):
        self.orders: List[Order] = []
        self.archived: List[ArchivedOrder] = []
        self.construction_items: List[ConstructionItem] = []
        self.order_items: List[OrderItem] = []
        self.users: List[User] = []
        self.notifications: List[Notification] = []
        self.statistics: Dict[str, Any] = {}
        self.calls: List[str] = []
        # method name -> exception to raise
        self.failures: Dict[str, Exception] = {}
        # method name -> ConnectorResult to return instead of the normal one
        self.soft_results: Dict[str, ConnectorResult] = {}

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]

    async def get_orders(self) -> List[Order]:
        self._enter("get_orders")
        return list(self.orders)

    async def add_order(self, order: NewOrder) -> Order:
        self._enter("add_order")
        record = Order(
            id=next_sequential_id((o.id for o in self.orders), "ORD"),
            order_date="2025-06-01",
            created_at="2025-06-01T00:00:00.000Z",
            updated_at="2025-06-01T00:00:00.000Z",
            **order.model_dump(exclude={"construction_items"}),
        )
        self.orders.append(record)
        return record

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Order:
        self._enter("update_order")
        for index, order in enumerate(self.orders):
            if order.id == order_id:
                self.orders[index] = Order.model_validate({**order.model_dump(), **fields})
                return self.orders[index]
        raise RecordNotFoundError(f"Order {order_id} not found")

    async def get_archived_orders(self) -> List[ArchivedOrder]:
        self._enter("get_archived_orders")
        return list(self.archived)

    async def get_construction_items(self) -> List[ConstructionItem]:
        self._enter("get_construction_items")
        return list(self.construction_items)

    async def get_order_items(self, order_id: str) -> List[OrderItem]:
        self._enter("get_order_items")
        return [item for item in self.order_items if item.order_id == order_id]

    async def get_all_order_items(self) -> List[OrderItem]:
        self._enter("get_all_order_items")
        return list(self.order_items)

    async def get_users(self) -> List[User]:
        self._enter("get_users")
        return list(self.users)

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> ConnectorResult:
        self._enter("update_user")
        if "update_user" in self.soft_results:
            return self.soft_results["update_user"]
        for index, user in enumerate(self.users):
            if user.id == user_id:
                self.users[index] = User.model_validate({**user.model_dump(), **fields})
                return ConnectorResult(success=True, data=self.users[index])
        return ConnectorResult(success=False, error="ユーザーが見つかりません")

    async def delete_user(self, user_id: str) -> ConnectorResult:
        self._enter("delete_user")
        if "delete_user" in self.soft_results:
            return self.soft_results["delete_user"]
        before = len(self.users)
        self.users = [user for user in self.users if user.id != user_id]
        if len(self.users) == before:
            return ConnectorResult(success=False, error="ユーザーが見つかりません")
        return ConnectorResult(success=True)

    async def get_statistics(self) -> Dict[str, Any]:
        self._enter("get_statistics")
        return dict(self.statistics)

    async def add_notification(
        self,
        type: str,
        title: str,
        message: str,
        user_id: Optional[str] = None,
    ) -> Notification:
        self._enter("add_notification")
        notification = Notification(
            id=next_sequential_id((n.id for n in self.notifications), "NOT"),
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            created_at="2025-06-01T00:00:00.000Z",
        )
        self.notifications.append(notification)
        return notification


class FakeMailer:
    def __init__(self, configured: bool = True, error: Optional[Exception] = None):
        self.configured = configured
        self.error = error
        self.sent: List[Dict[str, Any]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def send_notification_async(self, notification, recipients, customer_info=None):
        if self.error:
            raise self.error
        addresses = [user.email for user in recipients if user.email]
        self.sent.append({
            "notification": notification,
            "addresses": addresses,
            "customer_info": customer_info,
        })
        return addresses


@pytest.fixture
def datastore() -> FakeDatastore:
    store = FakeDatastore()
    store.users = [
        User(id="ADM001", role=UserRole.ADMIN, company_name="本社", store_name="管理部", email="admin@example.com"),
        User(id="USR001", company_name="テスト不動産", store_name="渋谷店", email="shibuya@example.com",
             phone_number="03-0000-0000", address="東京都渋谷区"),
    ]
    store.orders = [
        Order(id="ORD001", user_id="USR001", property_name="サンプルマンション", room_number="101",
              address="東京都渋谷区1-2-3", construction_date="2025-07-01", key_status=KeyStatus.HANDED),
    ]
    store.construction_items = [
        ConstructionItem(id="ITEM001", name="クリーニング", price=15000, active=True),
        ConstructionItem(id="ITEM002", name="クロス張替え", price=30000, active=False),
        ConstructionItem(
            id="ITEM003", name="エアコン洗浄", price=8800, active=True, has_area_selection=True,
            price_options=[PriceOption(label="30㎡未満", price=8800), PriceOption(label="30㎡以上", price=12000)],
        ),
    ]
    return store


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def client(datastore: FakeDatastore, mailer: FakeMailer):
    app.dependency_overrides[get_datastore] = lambda: datastore
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
