"""
Request body and query-string validation with pydantic models.
"""

import uuid
from typing import Any, Dict, List, Mapping, Type, TypeVar
import azure.functions as func
from pydantic import BaseModel, ValidationError

from .errors import InvalidInputError, MalformedBodyError

ModelT = TypeVar("ModelT", bound=BaseModel)


def read_json_body(req: func.HttpRequest) -> Any:
    """
    Parse the JSON body. An empty body is treated as an empty object.

    Raises:
        MalformedBodyError: If the body is not valid JSON
    """
    if not req.get_body():
        return {}
    try:
        return req.get_json()
    except ValueError:
        raise MalformedBodyError("Invalid JSON body")


def _field_errors(error: ValidationError) -> List[Dict[str, str]]:
    errors = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "body"
        errors.append({"field": field, "message": item["msg"]})
    return errors


def validate(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate data against a model.

    Raises:
        InvalidInputError: With one entry per failing field
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError("Validation failed", errors=_field_errors(e))


def parse_body(req: func.HttpRequest, model: Type[ModelT]) -> ModelT:
    """Parse and validate the JSON body of a request."""
    return validate(model, read_json_body(req))


def parse_query(req: func.HttpRequest, model: Type[ModelT]) -> ModelT:
    """Validate the query string. Empty values count as absent."""
    params = {key: value for key, value in req.params.items() if value != ""}
    return validate(model, params)


def build_update(dto: BaseModel, columns: Mapping[str, str]) -> Dict[str, Any]:
    """
    Build an update payload from the fields the client actually sent.

    Args:
        dto: Validated input model
        columns: Mapping of input field name to table column

    Returns:
        dict containing only provided fields, keyed by column
    """
    provided = dto.model_fields_set
    return {
        column: getattr(dto, name)
        for name, column in columns.items()
        if name in provided
    }


def require_uuid(value: str, field: str = "id") -> str:
    """
    Check that an identifier taken from the route, form or query is a UUID.

    Raises:
        InvalidInputError: If the value does not parse as a UUID
    """
    try:
        return str(uuid.UUID(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidInputError(
            f"Invalid {field}",
            errors=[{"field": field, "message": "Must be a UUID"}]
        )
