"""
Standard HTTP response helpers for consistent API responses.
"""

import datetime
import decimal
import json
import uuid
from typing import Any, Optional, Dict, List, Union
import azure.functions as func

from .errors import ServiceError


def json_serialize(obj: Any) -> str:
    """
    Serialize object to JSON, handling datetime, UUID and Decimal types.
    """
    def default_serializer(o):
        if isinstance(o, (datetime.datetime, datetime.date, datetime.time)):
            return o.isoformat()
        if isinstance(o, uuid.UUID):
            return str(o)
        if isinstance(o, decimal.Decimal):
            return float(o)
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    return json.dumps(obj, default=default_serializer)


def success_response(
    data: Union[Dict, List, Any],
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a successful JSON response.

    Args:
        data: Response data to serialize
        status_code: HTTP status code (default: 200)
        headers: Optional additional headers

    Returns:
        Azure Functions HttpResponse
    """
    response_headers = {
        "Content-Type": "application/json",
        **(headers or {})
    }

    return func.HttpResponse(
        json_serialize(data),
        status_code=status_code,
        mimetype="application/json",
        headers=response_headers
    )


def no_content_response() -> func.HttpResponse:
    """Create a 204 No Content response."""
    return func.HttpResponse(status_code=204)


def error_response(
    message: str,
    status_code: int = 400,
    errors: Optional[List[Dict]] = None,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create an error JSON response.

    Args:
        message: Error message
        status_code: HTTP status code (default: 400)
        errors: Optional list of detailed errors
        headers: Optional additional headers

    Returns:
        Azure Functions HttpResponse with error details
    """
    error_body = {
        "error": True,
        "message": message,
    }

    if errors:
        error_body["errors"] = errors

    response_headers = {
        "Content-Type": "application/json",
        **(headers or {})
    }

    return func.HttpResponse(
        json_serialize(error_body),
        status_code=status_code,
        mimetype="application/json",
        headers=response_headers
    )


def service_error_response(error: ServiceError) -> func.HttpResponse:
    """Map a ServiceError onto its HTTP status and JSON error body."""
    return error_response(error.message, error.http_status, errors=error.errors)


def internal_error_response(
    message: str = "Internal server error"
) -> func.HttpResponse:
    """Create a 500 Internal Server Error response."""
    return error_response(message, status_code=500)
