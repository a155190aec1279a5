"""
Standard Result Models

Provides a consistent success/failure envelope for service entry points so
callers branch on ``success`` instead of catching exceptions.
"""

from typing import TypeVar, Generic, Optional, List, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime


T = TypeVar("T")


class ResponseMeta(BaseModel):
    """Metadata attached to a result"""

    timestamp: datetime = Field(default_factory=datetime.now, description="Result timestamp")
    processing_time_ms: Optional[float] = Field(None, description="Processing time in milliseconds")
    version: str = Field(default="1.0", description="Result schema version")


class ErrorDetail(BaseModel):
    """Detailed error information"""

    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable error message")
    field: Optional[str] = Field(None, description="Field that caused the error (for validation errors)")
    context: Optional[Dict[str, Any]] = Field(None, description="Additional error context")


class ServiceResult(BaseModel, Generic[T]):
    """
    Success/failure envelope returned by public service operations

    Usage:
        return ServiceResult.ok(data=analytics)
        return ServiceResult.fail(message="Failed to fetch orders", code="ORDER_RETRIEVAL_FAILED")
    """

    success: bool = Field(description="Whether the operation succeeded")
    data: Optional[T] = Field(None, description="Operation payload")
    meta: ResponseMeta = Field(default_factory=ResponseMeta, description="Result metadata")
    errors: List[ErrorDetail] = Field(default_factory=list, description="List of errors if any")
    message: Optional[str] = Field(None, description="Optional status message")

    @classmethod
    def ok(
        cls,
        data: Optional[T] = None,
        message: Optional[str] = None,
        processing_time_ms: Optional[float] = None,
    ) -> "ServiceResult[T]":
        """Create a successful result"""
        return cls(
            success=True,
            data=data,
            meta=ResponseMeta(processing_time_ms=processing_time_ms),
            errors=[],
            message=message,
        )

    @classmethod
    def fail(
        cls,
        message: str,
        code: str = "ERROR",
        context: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[T]":
        """Create a failed result"""
        return cls(
            success=False,
            data=None,
            errors=[ErrorDetail(code=code, message=message, context=context)],
            message=message,
        )

    @property
    def error_code(self) -> Optional[str]:
        return self.errors[0].code if self.errors else None

    @property
    def reason(self) -> Optional[str]:
        """Failure reason, or None for successful results"""
        if self.success:
            return None
        return self.message
