"""
Response envelope helpers: {success, message, data?, count?, errors?, error?}
"""

from typing import Any, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _encode(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, list):
        return [_encode(item) for item in data]
    return jsonable_encoder(data)


def envelope(
    status_code: int,
    success: bool,
    message: str,
    data: Any = None,
    count: Optional[int] = None,
    errors: Optional[List[str]] = None,
    error: Optional[str] = None,
    **extra: Any
) -> JSONResponse:
    """Build a JSON envelope, omitting fields that were not supplied"""
    content = {"success": success, "message": message}

    if data is not None:
        content["data"] = _encode(data)
    if count is not None:
        content["count"] = count
    if errors is not None:
        content["errors"] = errors
    if error is not None:
        content["error"] = error
    content.update(jsonable_encoder(extra))

    return JSONResponse(status_code=status_code, content=content)


def success_response(message: str, data: Any = None, status_code: int = 200, **extra: Any) -> JSONResponse:
    return envelope(status_code, True, message, data=data, **extra)


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return envelope(status_code, False, message, **extra)
