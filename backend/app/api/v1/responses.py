"""
responses.py — Response envelopes shared by the v1 routers

Success: {"success": true, "data": ..., "message": ...}   (message optional)
Failure: {"success": false, "error": "..."}              (built in main.py)

Models are serialised with their camelCase aliases; None fields are dropped,
so an order line without a catalog match carries no `constructionItem` key.
"""

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = jsonable_encoder(data, by_alias=True, exclude_none=True)
    return body


def error_response(error: str) -> Dict[str, Any]:
    return {"success": False, "error": error}
