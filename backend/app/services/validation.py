"""
validation.py — Request Input Checks

Purpose:
- Field-presence and format checks run before any datastore mutation.
- Each check raises ValidationError naming the first offending field, so
  the order in which fields are listed below is part of the API behaviour.

"Missing" means falsy: absent, None, "" (and 0 / empty list).
"""

import re
from typing import Any, Dict, List, Mapping, Sequence

from app.models.order import KeyStatus, NewOrder, OrderItemSelection
from app.models.user import USER_STATUSES, UserRole
from app.services.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ORDER_REQUIRED_FIELDS = ("userId", "propertyName", "address", "constructionDate")
ORDER_OPTIONAL_TEXT_FIELDS = ("roomNumber", "keyLocation", "keyReturn", "notes", "contactPerson")
USER_REQUIRED_FIELDS = ("companyName", "storeName", "email", "phoneNumber", "address")

INVALID_KEY_STATUS_MESSAGE = "有効な鍵ステータスを指定してください"
MISSING_ORDER_FIELD_MESSAGE = "必須項目が不足しています"
MISSING_USER_ID_MESSAGE = "ユーザーIDが必要です"
INVALID_EMAIL_MESSAGE = "メールアドレスの形式が正しくありません"
INVALID_QUANTITY_MESSAGE = "数量は1以上で入力してください"
INVALID_ROLE_MESSAGE = "有効な権限を指定してください"
INVALID_USER_STATUS_MESSAGE = "有効なステータスを指定してください"


def first_missing(payload: Mapping[str, Any], fields: Sequence[str]) -> str:
    """Name of the first falsy field in `fields`, or "" when all are present."""
    for field in fields:
        if not payload.get(field):
            return field
    return ""


def validate_key_status(value: Any) -> KeyStatus:
    if value not in (KeyStatus.PENDING.value, KeyStatus.HANDED.value):
        raise ValidationError(INVALID_KEY_STATUS_MESSAGE, field="keyStatus")
    return KeyStatus(value)


def validate_email(value: str) -> None:
    if not EMAIL_PATTERN.match(value):
        raise ValidationError(INVALID_EMAIL_MESSAGE, field="email")


def validate_new_order(payload: Mapping[str, Any]) -> NewOrder:
    """
    Check a create-order payload (camelCase keys) and fill defaults.

    Optional text fields become "" when omitted.
    """
    missing = first_missing(payload, ORDER_REQUIRED_FIELDS)
    if missing:
        raise ValidationError(f"{MISSING_ORDER_FIELD_MESSAGE}: {missing}", field=missing)

    selections = _order_item_selections(payload.get("constructionItems") or [])

    data: Dict[str, Any] = {field: payload[field] for field in ORDER_REQUIRED_FIELDS}
    for field in ORDER_OPTIONAL_TEXT_FIELDS:
        data[field] = payload.get(field) or ""
    data["roomArea"] = payload.get("roomArea") or None
    data["constructionItems"] = selections
    return NewOrder(**data)


def _order_item_selections(items: List[Any]) -> List[OrderItemSelection]:
    selections = []
    for index, item in enumerate(items):
        if not item.get("itemId"):
            raise ValidationError(
                f"{MISSING_ORDER_FIELD_MESSAGE}: constructionItems.{index}.itemId",
                field=f"constructionItems.{index}.itemId",
            )
        quantity = item.get("quantity", 1)
        if not isinstance(quantity, int) or quantity < 1:
            raise ValidationError(INVALID_QUANTITY_MESSAGE, field=f"constructionItems.{index}.quantity")
        selections.append(OrderItemSelection(
            item_id=item["itemId"],
            quantity=quantity,
            selected_area_option=item.get("selectedAreaOption") or None,
        ))
    return selections


def validate_user_id(user_id: Any) -> str:
    if not user_id:
        raise ValidationError(MISSING_USER_ID_MESSAGE, field="userId")
    return user_id


def validate_user_update(user_id: Any, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check a user update. Order of checks: userId, required fields
    (companyName, storeName, email, phoneNumber, address), e-mail format,
    then the optional role / status values.

    Returns the update as snake_case column values.
    """
    validate_user_id(user_id)

    missing = first_missing(payload, USER_REQUIRED_FIELDS)
    if missing:
        raise ValidationError(f"{missing}は必須項目です", field=missing)

    validate_email(payload["email"])

    fields = {
        "company_name": payload["companyName"],
        "store_name": payload["storeName"],
        "email": payload["email"],
        "phone_number": payload["phoneNumber"],
        "address": payload["address"],
    }
    if payload.get("role"):
        if payload["role"] not in {role.value for role in UserRole}:
            raise ValidationError(INVALID_ROLE_MESSAGE, field="role")
        fields["role"] = payload["role"]
    if payload.get("status"):
        if payload["status"] not in USER_STATUSES:
            raise ValidationError(INVALID_USER_STATUS_MESSAGE, field="status")
        fields["status"] = payload["status"]
    return fields
