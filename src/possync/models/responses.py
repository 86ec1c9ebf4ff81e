"""Generic API response envelope shared with the request layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiResponse(BaseModel):
    """``{success, data, message, errors, timestamp}`` plus ``status_code`` on failure."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: Any = None
    message: str = ""
    errors: list[str] = Field(default_factory=list)
    status_code: int | None = None
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: camelCase ``statusCode``, omitted on success."""
        body: dict[str, Any] = {
            "success": self.success,
            "data": self.data,
            "message": self.message,
            "errors": list(self.errors),
        }
        if self.status_code is not None:
            body["statusCode"] = self.status_code
        body["timestamp"] = self.timestamp.isoformat()
        return body
