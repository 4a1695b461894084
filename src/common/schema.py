"""JSON Schema validation helpers for input documents.

Wraps jsonschema Draft7 validation and reports the first error (ordered by
path) as a project exception so callers can surface a single readable
message.
"""

from __future__ import annotations

from typing import Any, Dict, Type

from jsonschema import Draft7Validator

from errors import FeaturePlanError


def validate_document(
    schema: Dict[str, Any],
    data: Any,
    error_cls: Type[FeaturePlanError],
    what: str = "input",
) -> None:
    """Validate *data* strictly and raise *error_cls* on the first error.

    Args:
        schema: Draft-07 JSON Schema dict.
        data:   Payload to validate.
        error_cls: Exception type raised on failure.
        what: Human readable name of the payload, used in the message.
    """
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        msg = f"Invalid {what} at '{path}': {first.message}"
        raise error_cls(msg) from first
