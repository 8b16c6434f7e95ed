"""stitchQL argument value types."""
from stitchql.schema.values import Fragment, RawSQL, Row, Upsert, raw

__all__ = [
    "Fragment",
    "RawSQL",
    "Row",
    "Upsert",
    "raw",
]
