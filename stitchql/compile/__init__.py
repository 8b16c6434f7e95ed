"""stitchQL compilation layer: fragment lists → SQL text."""
from stitchql.compile.clauses import QueryBuilder
from stitchql.compile.compiler import ModifierCompiler, compose
from stitchql.compile.escaper import Escaper
from stitchql.compile.registry import ModifierRegistry

__all__ = [
    "Escaper",
    "ModifierCompiler",
    "ModifierRegistry",
    "QueryBuilder",
    "compose",
]
