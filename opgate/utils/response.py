"""Standardized response envelopes for operation results and errors."""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..core.errors import OperationError
from ..models.result import ExecutionResult


def is_success(result: Dict[str, Any]) -> bool:
    """Check if a response envelope reports success."""
    return bool(result.get("ok"))


def success_response(
    data: Any,
    warnings: Optional[List[str]] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create a successful response envelope.

    Args:
        data: The response data
        warnings: Optional list of warning messages
        metadata: Optional execution metadata

    Returns:
        Standardized success response
    """
    response = {
        "ok": True,
        "data": data
    }

    if warnings:
        response["warnings"] = warnings

    if metadata:
        response["metadata"] = metadata

    return response


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create an error response envelope.

    Args:
        message: Error message
        code: Optional error code
        details: Optional error details

    Returns:
        Standardized error response
    """
    error = {"message": message}

    if code:
        error["code"] = code

    if details:
        error["details"] = details

    return {
        "ok": False,
        "error": error
    }


def result_response(result: ExecutionResult) -> Dict[str, Any]:
    """Envelope for a returned ExecutionResult (core or middleware)."""
    if result.success:
        return success_response(result.data, metadata=result.metadata)

    response = error_response(result.error or "Operation failed", code="OPERATION_FAILED")
    if result.metadata:
        response["metadata"] = result.metadata
    return response


def exception_response(error: OperationError) -> Dict[str, Any]:
    """Envelope for a raised gate or execution error."""
    details = dict(error.details)
    details["operation_name"] = error.operation_name

    field_errors = getattr(error, "field_errors", None)
    if field_errors:
        details["field_errors"] = [
            {"field": fe.field, "message": fe.message} for fe in field_errors
        ]

    return error_response(error.message, code=error.code, details=details)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def to_json(response: Dict[str, Any]) -> str:
    """Serialize an envelope; pydantic models and enums are converted."""
    return json.dumps(response, indent=2, default=_json_default)
