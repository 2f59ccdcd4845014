"""
users.py — User Account Management

Purpose:
- Update and delete user accounts after validating the request.
- List users for the admin screens.

Failure policy:
- Bad input → ValidationError (400), the datastore is not called.
- Datastore reports `success: false` → SoftFailure (500) with its message.
- Datastore raises → PersistenceError (500) with a generic message.
"""

from typing import Any, List, Mapping

from app.core.logging import get_logger
from app.data.datastore import Datastore
from app.models.user import ConnectorResult, User
from app.services.errors import FETCH_FAILED_MESSAGE, GENERIC_SERVER_ERROR, PersistenceError, SoftFailure
from app.services.validation import validate_user_id, validate_user_update

logger = get_logger(__name__)

USER_UPDATED_MESSAGE = "ユーザー情報が更新されました"
USER_DELETED_MESSAGE = "ユーザーが削除されました"


def _unwrap(result: ConnectorResult, action: str, user_id: str) -> ConnectorResult:
    if not result.success:
        logger.warning("User %s %s rejected: %s", user_id, action, result.error)
        raise SoftFailure(result.error or GENERIC_SERVER_ERROR)
    return result


async def list_users(datastore: Datastore) -> List[User]:
    try:
        return await datastore.get_users()
    except Exception as exc:
        logger.exception("Failed to fetch users")
        raise PersistenceError(FETCH_FAILED_MESSAGE) from exc


async def update_user(user_id: Any, payload: Mapping[str, Any], datastore: Datastore) -> Any:
    """Returns the connector's `data` (the updated user, when it provides one)."""
    fields = validate_user_update(user_id, payload)

    try:
        result = await datastore.update_user(user_id, fields)
    except Exception as exc:
        logger.exception("Failed to update user %s", user_id)
        raise PersistenceError(GENERIC_SERVER_ERROR) from exc

    return _unwrap(result, "update", user_id).data


async def delete_user(user_id: Any, datastore: Datastore) -> None:
    validate_user_id(user_id)

    try:
        result = await datastore.delete_user(user_id)
    except Exception as exc:
        logger.exception("Failed to delete user %s", user_id)
        raise PersistenceError(GENERIC_SERVER_ERROR) from exc

    _unwrap(result, "delete", user_id)
