from typing import Any, Optional
from pydantic import BaseModel, Field, model_serializer


class ApiResponse(BaseModel):
    """Envelope returned by every endpoint: ``{success, data?, error?, message?, count?}``."""
    success: bool = Field(True, description="Whether the request succeeded")
    data: Any = Field(None, description="Payload of the response")
    error: Optional[str] = Field(None, description="Short error summary")
    message: Optional[str] = Field(None, description="Human readable message or raw error cause")
    count: Optional[int] = Field(None, description="Number of rows for list responses")

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler):
        payload = handler(self)
        return {key: value for key, value in payload.items() if value is not None or key == "success"}

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ApiResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def listing(cls, rows: list) -> "ApiResponse":
        return cls(success=True, data=rows, count=len(rows))

    @classmethod
    def failure(cls, error: str, message: Optional[str] = None) -> "ApiResponse":
        return cls(success=False, error=error, message=message)
