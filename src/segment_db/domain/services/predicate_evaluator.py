"""Predicate evaluation against stored rows.

Evaluation rules:
    - The predicate is a conjunction applied as a running filter: each
      term narrows the current candidate rows, in order.
    - A term holds for a row if any of its alternatives holds (short
      circuit).
    - An equality holds if the row's field, trimmed, equals the literal,
      trimmed. Values are opaque strings: no numeric coercion, no case
      folding.
    - An empty predicate matches every row.

Column names are resolved through the Table, so the synthetic primary
key shift is applied in one place.
"""

from __future__ import annotations

from typing import Sequence

from segment_db.domain.entities import Equality, Predicate, Table
from segment_db.domain.errors import UnknownColumn

_Resolved = list[list[tuple[int, str]]]


class PredicateEvaluator:
    """Evaluates conjunctive-equality predicates for one table at a time."""

    def resolve(self, predicate: Predicate, table: Table) -> _Resolved:
        """Resolve every equality of ``predicate`` to (field index, value).

        Raises:
            UnknownColumn: If any referenced column is not in ``table``,
                or is qualified with another table's name.
        """
        return [
            [self._resolve_equality(eq, table) for eq in term.alternatives]
            for term in predicate.terms
        ]

    def validate(self, predicate: Predicate, table: Table) -> None:
        """Check that every column referenced by ``predicate`` exists."""
        self.resolve(predicate, table)

    def filter_rows(
        self,
        predicate: Predicate,
        table: Table,
        rows: Sequence[list[str]],
    ) -> list[list[str]]:
        """Return the rows satisfying ``predicate``, in their original order.

        Raises:
            UnknownColumn: If the predicate references an unknown column.
        """
        candidates = list(rows)
        for term in self.resolve(predicate, table):
            candidates = [row for row in candidates if _term_holds(term, row)]
        return candidates

    def matches(self, predicate: Predicate, table: Table, row: list[str]) -> bool:
        """Check a single row against ``predicate``."""
        return all(_term_holds(term, row) for term in self.resolve(predicate, table))

    @staticmethod
    def _resolve_equality(eq: Equality, table: Table) -> tuple[int, str]:
        if eq.table is not None and eq.table != table.name:
            raise UnknownColumn(f"{eq.table}.{eq.column}", table.name)
        return table.field_index(eq.column), eq.value.strip()


def _term_holds(alternatives: list[tuple[int, str]], row: list[str]) -> bool:
    for index, value in alternatives:
        if index < len(row) and row[index].strip() == value:
            return True
    return False
