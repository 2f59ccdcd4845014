"""
construction_items.py — Construction Item Catalog Endpoint

Endpoints:
- GET /construction-items → catalog entries whose `active` flag is set
"""

from fastapi import APIRouter, Depends

from app.api.v1.responses import success_response
from app.core.dependencies import get_datastore
from app.data.datastore import Datastore
from app.services.enrichment import list_active_construction_items

router = APIRouter(
    prefix="/construction-items",
    tags=["construction-items"]
)


@router.get("")
async def get_construction_items(datastore: Datastore = Depends(get_datastore)):
    return success_response(await list_active_construction_items(datastore))
