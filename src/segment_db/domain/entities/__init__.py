"""Domain entities - schema, tables and the predicate tree."""

from segment_db.domain.entities.predicate import Equality, Predicate, Term
from segment_db.domain.entities.schema import Schema, TableSchema
from segment_db.domain.entities.table import Table

__all__ = [
    "Equality",
    "Predicate",
    "Schema",
    "Table",
    "TableSchema",
    "Term",
]
