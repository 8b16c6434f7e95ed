"""stitchQL result layer: tabular results and the result cursor."""
from stitchql.result.cursor import ResultCursor
from stitchql.result.tables import BufferedResult, StreamingResult, TabularResult

__all__ = [
    "BufferedResult",
    "ResultCursor",
    "StreamingResult",
    "TabularResult",
]
