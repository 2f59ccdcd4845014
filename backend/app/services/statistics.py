"""
statistics.py — Dashboard statistics

The datastore computes the summary; it is passed through unchanged.
"""

from typing import Any, Dict

from app.core.logging import get_logger
from app.data.datastore import Datastore
from app.services.errors import FETCH_FAILED_MESSAGE, PersistenceError

logger = get_logger(__name__)


async def get_statistics(datastore: Datastore) -> Dict[str, Any]:
    try:
        return await datastore.get_statistics()
    except Exception as exc:
        logger.exception("Failed to fetch statistics")
        raise PersistenceError(FETCH_FAILED_MESSAGE) from exc
