"""Structural validation of decoded payloads against a field -> type contract."""

from collections.abc import Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from ..errors import MISSING_KEY, TYPE_MISMATCH, ConfigError, SchemaError

TYPE_TAGS = ("string", "number", "boolean", "array", "object")
ROOT_FIELD = "<root>"


class SchemaDescriptor(Mapping):
    """Read-only field name -> type tag mapping. Iterates in declaration order."""

    def __init__(self, fields: Mapping[str, str]):
        unknown = {name: tag for name, tag in fields.items() if tag not in TYPE_TAGS}
        if unknown:
            raise ConfigError(
                f"Unsupported schema type tags {unknown}. Use one of: {', '.join(TYPE_TAGS)}"
            )
        self._fields = MappingProxyType(dict(fields))

    def __getitem__(self, name: str) -> str:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"SchemaDescriptor({dict(self._fields)!r})"


DEFAULT_SCORE_SCHEMA = SchemaDescriptor(
    {
        "id": "number",
        "name": "string",
        "score": "number",
        "timestamp": "string",
    }
)


def resolve_type_tag(value: Any) -> str:
    if isinstance(value, str):
        return "string"
    # bool is a subclass of int and must be checked first
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, Sequence):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


def validate_payload(payload: Any, schema: Mapping[str, str]) -> None:
    """Raise SchemaError for the first missing key or type mismatch; never mutates payload."""
    if not isinstance(payload, Mapping):
        raise SchemaError(TYPE_MISMATCH, ROOT_FIELD, "object", resolve_type_tag(payload))

    for field, expected_type in schema.items():
        if field not in payload:
            raise SchemaError(MISSING_KEY, field, expected_type)

        actual_type = resolve_type_tag(payload[field])
        if actual_type != expected_type:
            raise SchemaError(TYPE_MISMATCH, field, expected_type, actual_type)
