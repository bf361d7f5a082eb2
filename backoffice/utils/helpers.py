import math
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from fastapi.responses import JSONResponse

from .exceptions import ValidationError


def serialize_mongo_doc(doc):
    """Recursively convert ObjectIds and datetimes in a MongoDB document."""
    if not doc:
        return doc

    if isinstance(doc, list):
        return [serialize_mongo_doc(d) for d in doc]

    if isinstance(doc, dict):
        clean = {}
        for k, v in doc.items():
            if isinstance(v, ObjectId):
                clean[k] = str(v)
            elif isinstance(v, datetime):
                clean[k] = v.isoformat()
            elif isinstance(v, (dict, list)):
                clean[k] = serialize_mongo_doc(v)
            else:
                clean[k] = v
        return clean

    if isinstance(doc, ObjectId):
        return str(doc)

    return doc


def from_mongo(doc: Optional[dict]) -> Optional[dict]:
    """Stored document → record with a string `_id`."""
    if doc is None:
        return None
    doc["_id"] = str(doc["_id"])
    return doc


def new_object_id() -> str:
    return str(ObjectId())


def parse_object_id(id_str: str, label: str = "ID") -> str:
    """Validate an id string, raising a 400 for malformed ids."""
    if not id_str or not ObjectId.is_valid(id_str):
        raise ValidationError(f"Invalid {label}")
    return id_str


def page_window(page: int, limit: int) -> int:
    """Number of documents to skip for a 1-based page."""
    return (page - 1) * limit


def success_response(
    data: Optional[Any] = None,
    message: str = "Success",
    code: int = 200,
) -> JSONResponse:
    """Standard success JSON response."""
    content = {"success": True, "message": message}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=code, content=content)


def paginated_response(
    items: list,
    page: int,
    limit: int,
    total: int,
    message: str = "Success",
) -> JSONResponse:
    """List envelope: page metadata alongside the rows."""
    content = {
        "success": True,
        "message": message,
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
        "count": len(items),
        "data": items,
    }
    return JSONResponse(status_code=200, content=content)


def error_response(
    message: str,
    code: int = 400,
    data: Optional[Any] = None,
) -> JSONResponse:
    """Standard error JSON response."""
    content = {"success": False, "error": {"code": code, "message": message}}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=code, content=content)
