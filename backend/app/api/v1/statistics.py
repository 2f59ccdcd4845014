"""
statistics.py — Dashboard Statistics Endpoint

Endpoints:
- GET /statistics → summary computed by the datastore, returned as-is
"""

from fastapi import APIRouter, Depends

from app.api.v1.responses import success_response
from app.core.dependencies import get_datastore
from app.data.datastore import Datastore
from app.services.statistics import get_statistics

router = APIRouter(
    prefix="/statistics",
    tags=["statistics"]
)


@router.get("")
async def statistics(datastore: Datastore = Depends(get_datastore)):
    return success_response(await get_statistics(datastore))
