"""Validate config and report payloads against the bundled schemas."""

from functools import lru_cache
from typing import Any

from jsonschema.validators import Draft202012Validator

from secgate.schemas.registry import get_registry


@lru_cache(maxsize=None)
def _validator_for(schema_name: str) -> Draft202012Validator:
    schema = get_registry().get_json(schema_name)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def schema_errors(data: Any, schema_name: str) -> list[str]:
    """Human-readable violations, ordered by the path they occur at.

    Each entry is ``<dotted.path>: <message>``; errors at the document root
    carry the bare message.
    """
    errors = sorted(_validator_for(schema_name).iter_errors(data), key=lambda e: [str(p) for p in e.path])
    messages = []
    for error in errors:
        where = ".".join(str(p) for p in error.path)
        messages.append(f"{where}: {error.message}" if where else error.message)
    return messages


def validate_data(data: Any, schema_name: str, strict: bool = True) -> tuple[bool, list[str]]:
    """Check ``data`` against the named schema.

    Returns:
        (is_valid, error_messages)

    Raises:
        KeyError: If the schema is not bundled
        ValueError: If ``strict`` and the data does not validate
    """
    messages = schema_errors(data, schema_name)
    if messages and strict:
        details = "\n".join(f"  - {m}" for m in messages)
        raise ValueError(f"Schema validation failed for '{schema_name}':\n{details}")
    return not messages, messages
