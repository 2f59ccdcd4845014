"""
session.py — Session Capability Check

Purpose:
- Decide whether a stored client session may use a screen that needs a
  given role ("user" or "admin").
- Return a tagged result; redirecting is left to the caller.

The session is the JSON-encoded user stored under the `user` key of a
client-side key/value store (any Mapping works, e.g. a dict in tests).

Caller: a screen guard that holds the client's stored session. It calls
`check_session(storage, required_role)` and then navigates to
`redirect_target(result)` when that is not None. No API route depends on it,
because the HTTP endpoints carry no session.

This module does NOT:
- Authenticate credentials or issue tokens.
- Perform redirects or raise HTTP errors.
"""

import json
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from app.core.logging import get_logger
from app.models.user import User, UserRole

logger = get_logger(__name__)

SESSION_KEY = "user"
LOGIN_PATH = "/login"
USER_HOME_PATH = "/user"


@dataclass(frozen=True)
class Unauthenticated:
    """No session, or one that cannot be read."""


@dataclass(frozen=True)
class Unauthorized:
    """Signed in, but the role does not allow this screen."""
    user: User


@dataclass(frozen=True)
class Authenticated:
    user: User


SessionResult = Union[Unauthenticated, Unauthorized, Authenticated]


def _stored_user(storage: Mapping[str, str]) -> Optional[User]:
    raw = storage.get(SESSION_KEY)
    if not raw:
        return None
    try:
        return User.model_validate(json.loads(raw))
    except (ValueError, TypeError, PydanticValidationError) as exc:
        logger.warning("Unreadable session entry: %s", exc)
        return None


def check_session(storage: Mapping[str, str], required_role: str = UserRole.USER.value) -> SessionResult:
    """
    Check the stored session against `required_role`.

    Admin screens require role "admin"; user screens accept any signed-in user.
    """
    user = _stored_user(storage)
    if user is None:
        return Unauthenticated()
    if required_role == UserRole.ADMIN.value and not user.is_admin:
        return Unauthorized(user)
    return Authenticated(user)


def redirect_target(result: SessionResult) -> Optional[str]:
    """Where a screen should send the visitor, or None to stay."""
    if isinstance(result, Unauthenticated):
        return LOGIN_PATH
    if isinstance(result, Unauthorized):
        return USER_HOME_PATH
    return None
