"""Standard ``{status, message, data}`` response envelope."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapped around every successful API payload."""

    status: bool = True
    message: str = "OK"
    data: Optional[T] = None


def envelope(data: Any = None, message: str = "OK") -> dict[str, Any]:
    """Build a success envelope; FastAPI validates it against the route's model."""
    return {"status": True, "message": message, "data": data}


class AuditEntryOut(BaseModel):
    """One row of a record's change history."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    action: str
    actor_id: Optional[str] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    created_at: datetime
