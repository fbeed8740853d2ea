from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    success: bool = Field(default=True, description="Whether the request succeeded")
    message: str = Field(..., description="Response message")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Response time")
    data: Optional[Any] = Field(None, description="Response payload")

    class Config:
        populate_by_name = True
