"""Unified API response wrapper.

All API endpoints return this format:
{
    "success": true,     // false on any error
    "code": 0,           // 0=success, non-0=error code
    "message": "success",
    "data": { ... },     // null on error
    "timestamp": "...",
    "requestId": "..."
}

Payload models inherit CamelModel so the wire format is camelCase
(productId, demandValue, ...) while Python code stays snake_case.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for request/response payloads: camelCase on the wire, either on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ApiResponse(CamelModel):
    success: bool = True
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, mode="json")
    return ApiResponse(success=True, code=0, message=message, data=data)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(success=False, code=code, message=message, data=None)


def respond(request: Any, data: Any = None, message: str = "success") -> ApiResponse:
    """success_response carrying the request id set by RequestLogMiddleware."""
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
