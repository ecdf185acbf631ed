"""Uniform response envelopes for success and error responses."""
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(
    message: str,
    data: Any = None,
    status_code: int = 200,
) -> JSONResponse:
    """
    Build the standard `{status, message, data}` envelope.

    `data` is serialized with camelCase aliases; a missing payload becomes
    `null` while an empty list stays an empty list.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "success" if 200 <= status_code < 300 else "error",
            "message": message or "Success",
            "data": jsonable_encoder(data) if data is not None else None,
        },
    )


def error_response(
    status_code: int,
    message: str,
    error_type: str,
    stack: str | None = None,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Build the `{success, statusCode, message, errorType, stack?}` error envelope."""
    content: dict[str, Any] = {
        "success": False,
        "statusCode": status_code,
        "message": message or "Internal Server Error",
        "errorType": error_type,
    }
    content.update(extra)
    if stack is not None:
        content["stack"] = stack
    return JSONResponse(status_code=status_code, content=content, headers=headers)
