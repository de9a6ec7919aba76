"""
Schema Validation

Thin glue over jsonschema used at every boundary: connection
configuration, execute inputs and execute outputs.
"""

import logging
from typing import Any, Dict, List, Sequence

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from .exceptions import SchemaValidationError

logger = logging.getLogger(__name__)


def _format_error(err, prefix: str = "") -> str:
    path = "/".join(str(p) for p in [prefix, *err.path] if p != "")
    return f"{err.message} at path: {path or '/'}"


def collect_errors(schema: Dict[str, Any], payload: Any, prefix: str = "") -> List[str]:
    """
    Validate a payload against a JSON schema.

    Args:
        schema: JSON schema (draft 2020-12)
        payload: Object to validate
        prefix: Path prefix prepended to each reported error

    Returns:
        List of validation error messages (empty if valid)
    """
    validator = Draft202012Validator(schema)
    return [
        _format_error(err, prefix)
        for err in sorted(validator.iter_errors(payload), key=str)
    ]


def validate_payload(schema: Dict[str, Any], payload: Any, what: str) -> None:
    """Raise SchemaValidationError if the payload does not match the schema."""
    errors = collect_errors(schema, payload)
    if errors:
        raise SchemaValidationError(f"{what} failed validation", errors)


def validate_batch(schema: Dict[str, Any], records: Sequence[Any], what: str) -> None:
    """
    Validate every record of a batch before anything else happens.

    All violations across the batch are reported together; each error
    path starts with the record index.
    """
    if isinstance(records, (str, bytes, dict)) or not isinstance(records, Sequence):
        raise SchemaValidationError(f"{what} must be a list of records")

    errors: List[str] = []
    for idx, record in enumerate(records):
        errors.extend(collect_errors(schema, record, prefix=str(idx)))

    if errors:
        logger.warning(f"{what} rejected with {len(errors)} schema error(s)")
        raise SchemaValidationError(f"{what} failed validation", errors)


def check_schema(schema: Dict[str, Any]) -> List[str]:
    """Return problems with a schema document itself (empty if well formed)."""
    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as e:
        return [e.message]
    return []
