"""
users.py — User Account Endpoints (API Layer)

Endpoints:
- GET    /users          → every user (no password data)
- PUT    /users/update   → update contact details   {"userId": ..., "companyName": ..., ...}
- DELETE /users/delete   → delete an account        {"userId": ...}

Validation and connector results are handled in app.services.users.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from app.api.v1.responses import success_response
from app.core.dependencies import get_datastore
from app.data.datastore import Datastore
from app.models.base import CamelModel
from app.services import users
from app.services.users import USER_DELETED_MESSAGE, USER_UPDATED_MESSAGE

router = APIRouter(
    prefix="/users",
    tags=["users"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class UserUpdateRequest(CamelModel):
    user_id: Optional[str] = None
    company_name: Optional[str] = None
    store_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None


class UserDeleteRequest(CamelModel):
    user_id: Optional[str] = None


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.get("")
async def list_users(datastore: Datastore = Depends(get_datastore)):
    return success_response(await users.list_users(datastore))


@router.put("/update")
async def update_user(body: UserUpdateRequest, datastore: Datastore = Depends(get_datastore)):
    """
    PUT /users/update

    Raises:
        400: userId missing, a contact field empty, or malformed e-mail
        500: the datastore rejected or failed the update
    """
    payload = body.model_dump(by_alias=True, exclude={"user_id"})
    updated = await users.update_user(body.user_id, payload, datastore)
    return success_response(updated, message=USER_UPDATED_MESSAGE)


@router.delete("/delete")
async def delete_user(body: UserDeleteRequest, datastore: Datastore = Depends(get_datastore)):
    await users.delete_user(body.user_id, datastore)
    return success_response(message=USER_DELETED_MESSAGE)
