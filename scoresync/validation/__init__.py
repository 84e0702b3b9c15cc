from .schema import DEFAULT_SCORE_SCHEMA, TYPE_TAGS, SchemaDescriptor, resolve_type_tag, validate_payload

__all__ = [
    "DEFAULT_SCORE_SCHEMA",
    "TYPE_TAGS",
    "SchemaDescriptor",
    "resolve_type_tag",
    "validate_payload",
]
