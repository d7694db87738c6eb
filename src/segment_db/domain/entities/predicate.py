"""Typed WHERE-clause tree.

A predicate is a conjunction of terms; each term is a disjunction of
column equalities::

    (status = 'a' OR status = 'b') AND id = 3

    Predicate(terms=(
        Term((Equality("status", "a"), Equality("status", "b"))),
        Term((Equality("id", "3"),)),
    ))

The evaluator works on this tree only, never on raw text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(frozen=True, slots=True)
class Equality:
    """``column = value``, where the column may be qualified with a table."""

    column: str
    value: str
    table: str | None = None

    def __str__(self) -> str:
        qualified = f"{self.table}.{self.column}" if self.table else self.column
        return f"{qualified} = '{self.value}'"


@dataclass(frozen=True, slots=True)
class Term:
    """One conjunct: satisfied if any alternative holds."""

    alternatives: tuple[Equality, ...]

    def __post_init__(self) -> None:
        if not self.alternatives:
            raise ValueError("a term needs at least one alternative")

    def __str__(self) -> str:
        if len(self.alternatives) == 1:
            return str(self.alternatives[0])
        return "(" + " OR ".join(str(a) for a in self.alternatives) + ")"


@dataclass(frozen=True, slots=True)
class Predicate:
    """Conjunction of terms.

    Attributes:
        terms: The conjuncts, in source order.
        skipped: Source text of terms that were not of the supported
            ``column = value`` shape. The evaluator never sees them; the
            engine treats them as unsatisfiable.
    """

    terms: tuple[Term, ...] = ()
    skipped: tuple[str, ...] = field(default=())

    @classmethod
    def equals(cls, column: str, value: str) -> Predicate:
        """Shorthand for a single-equality predicate."""
        return cls(terms=(Term((Equality(column, value),)),))

    def equalities(self) -> Iterator[Equality]:
        for term in self.terms:
            yield from term.alternatives

    def __str__(self) -> str:
        return " AND ".join(str(t) for t in self.terms)
