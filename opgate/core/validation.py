"""Validator adapter over pydantic.

Wraps a pydantic-compatible type (usually a ``BaseModel`` subclass) behind
``validate(raw) -> ValidationResult``. Malformed input never raises; only
pydantic's own ``ValidationError`` is translated.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..specs.json_schema import build_json_schema
from .errors import ROOT_FIELD, FieldError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ValidationResult(Generic[T]):
    """Result of validating raw arguments against a schema.

    ``errors`` holds rendered messages (``"a.b: message"`` or the bare
    message for root issues); ``field_errors`` holds the same issues keyed
    by field, with root issues under ``ROOT_FIELD``.
    """
    success: bool
    data: Optional[T] = None
    errors: List[str] = field(default_factory=list)
    field_errors: List[FieldError] = field(default_factory=list)


def format_location(loc) -> str:
    """Join a pydantic error location into a dotted path."""
    return ".".join(str(part) for part in loc)


class SchemaValidator(Generic[T]):
    """Validates raw input against one schema and exposes its JSON schema."""

    def __init__(self, schema: Any):
        self.schema = schema
        self._adapter: TypeAdapter = TypeAdapter(schema)
        self._json_schema: Optional[Dict[str, Any]] = None

    def validate(self, raw: Any) -> ValidationResult[T]:
        try:
            data = self._adapter.validate_python(raw)
        except PydanticValidationError as exc:
            errors: List[str] = []
            field_errors: List[FieldError] = []
            for issue in exc.errors(include_url=False):
                path = format_location(issue.get("loc", ()))
                message = issue.get("msg", "Invalid value")
                if path:
                    errors.append(f"{path}: {message}")
                    field_errors.append(FieldError(field=path, message=message))
                else:
                    errors.append(message)
                    field_errors.append(FieldError(field=ROOT_FIELD, message=message))
            logger.debug(f"Schema validation failed with {len(errors)} issue(s)")
            return ValidationResult(success=False, errors=errors, field_errors=field_errors)

        return ValidationResult(success=True, data=data)

    def json_schema(self) -> Dict[str, Any]:
        """JSON schema for the wrapped type, refs inlined. Cached."""
        if self._json_schema is None:
            self._json_schema = build_json_schema(self._adapter)
        return copy.deepcopy(self._json_schema)
