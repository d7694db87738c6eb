"""Command parser using sqlglot.

This module turns command text into typed command values for the query
engine. sqlglot does the tokenizing and recursive-descent parsing; this
module only accepts the small subset the engine executes and converts it
into InsertCommand, SelectCommand or DeleteCommand.

Supported commands:
    - INSERT INTO t [(c1, c2, ...)] VALUES (v1, v2, ...)
    - SELECT * | c1[, c2 ...] FROM t1[, t2 ...] [WHERE ...]
    - DELETE FROM t WHERE ...

WHERE clauses are conjunctions of terms, each term being one equality or
a parenthesised OR of equalities::

    (status = 'a' OR status = 'b') AND id = 3

Terms of any other shape are kept aside in ``Predicate.skipped`` instead
of failing the parse; the engine decides what they mean per command.

References:
    - sqlglot documentation: https://sqlglot.com/
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import sqlglot
from sqlglot import exp

from segment_db.domain.entities import Equality, Predicate, Term
from segment_db.domain.errors import PredicateSyntaxError


class CommandType(Enum):
    """Types of commands."""

    INSERT = "insert"
    SELECT = "select"
    DELETE = "delete"


@dataclass(frozen=True)
class ColumnRef:
    """Reference to a column, optionally qualified with table name."""

    name: str
    table: str | None = None

    def __str__(self) -> str:
        if self.table:
            return f"{self.table}.{self.name}"
        return self.name


@dataclass(frozen=True)
class InsertCommand:
    """Append one row to a table.

    ``columns`` is empty when the command lists values in schema order.
    """

    table: str
    values: tuple[str, ...]
    columns: tuple[str, ...] = ()

    @property
    def command_type(self) -> CommandType:
        return CommandType.INSERT

    def __str__(self) -> str:
        return f"Insert({self.table}, values={list(self.values)})"


@dataclass(frozen=True)
class SelectCommand:
    """Read rows from one or more tables.

    ``columns`` is None for ``SELECT *``.
    """

    tables: tuple[str, ...]
    columns: tuple[ColumnRef, ...] | None = None
    predicate: Predicate | None = None

    @property
    def command_type(self) -> CommandType:
        return CommandType.SELECT

    @property
    def select_all(self) -> bool:
        return self.columns is None

    def __str__(self) -> str:
        cols = "*" if self.columns is None else ", ".join(str(c) for c in self.columns)
        where = f" WHERE {self.predicate}" if self.predicate else ""
        return f"Select({cols} FROM {', '.join(self.tables)}{where})"


@dataclass(frozen=True)
class DeleteCommand:
    """Remove the rows of a table matching a predicate."""

    table: str
    predicate: Predicate

    @property
    def command_type(self) -> CommandType:
        return CommandType.DELETE

    def __str__(self) -> str:
        return f"Delete({self.table} WHERE {self.predicate})"


Command = InsertCommand | SelectCommand | DeleteCommand


class ParseError(Exception):
    """Error during command parsing."""

    pass


_UNSUPPORTED_SELECT_CLAUSES = ("with", "distinct", "group", "having", "order", "limit", "offset")


class CommandParser:
    """Command parser using sqlglot.

    Example:
        >>> parser = CommandParser()
        >>> cmd = parser.parse("SELECT name FROM users WHERE status = 'a'")
        >>> print(cmd)
        Select(name FROM users WHERE status = 'a')
    """

    def __init__(self, dialect: str = "sqlite") -> None:
        """Initialize the parser.

        Args:
            dialect: SQL dialect to use for parsing (default: sqlite).
        """
        self._dialect = dialect

    def parse(self, text: str) -> Command:
        """Parse command text.

        Args:
            text: A single INSERT, SELECT or DELETE command.

        Returns:
            The typed command.

        Raises:
            ParseError: If the text is invalid or not a supported command.
        """
        if not text or not text.strip():
            raise ParseError("Empty command")

        try:
            statements = sqlglot.parse(text, dialect=self._dialect)
        except Exception as e:
            raise ParseError(f"Failed to parse command: {e}") from e

        statements = [s for s in statements if s is not None]
        if not statements:
            raise ParseError("Empty command")
        if len(statements) > 1:
            raise ParseError("Multiple commands not supported")

        stmt = statements[0]
        if isinstance(stmt, exp.Insert):
            return self._convert_insert(stmt)
        elif isinstance(stmt, exp.Select):
            return self._convert_select(stmt)
        elif isinstance(stmt, exp.Delete):
            return self._convert_delete(stmt)
        else:
            raise ParseError(f"Unsupported command: {type(stmt).__name__}")

    def parse_predicate(self, text: str) -> Predicate:
        """Parse a bare WHERE expression such as ``status = 'a' AND id = 3``.

        Raises:
            PredicateSyntaxError: If the expression cannot be parsed.
        """
        if not text or not text.strip():
            raise PredicateSyntaxError("Empty WHERE condition")
        try:
            condition = sqlglot.condition(text, dialect=self._dialect)
        except Exception as e:
            raise PredicateSyntaxError(f"Invalid WHERE condition {text!r}: {e}") from e
        return self._convert_predicate(condition)

    def _convert_insert(self, stmt: exp.Insert) -> InsertCommand:
        """Convert an INSERT statement."""
        table = stmt.find(exp.Table)
        if table is None:
            raise ParseError("INSERT requires table name")

        columns: tuple[str, ...] = ()
        col_list = stmt.find(exp.Schema)
        if col_list:
            columns = tuple(col.name for col in col_list.expressions)

        values = stmt.find(exp.Values)
        if values is None:
            raise ParseError("INSERT requires a VALUES list")
        if len(values.expressions) != 1:
            raise ParseError("INSERT accepts exactly one row of values")

        tuple_expr = values.expressions[0]
        items = tuple_expr.expressions if isinstance(tuple_expr, exp.Tuple) else [tuple_expr]
        row = []
        for val in items:
            text = _literal_text(val)
            if text is None:
                raise ParseError(f"Unsupported value: {val.sql(dialect=self._dialect)}")
            row.append(text)

        return InsertCommand(table=table.name, values=tuple(row), columns=columns)

    def _convert_select(self, stmt: exp.Select) -> SelectCommand:
        """Convert a SELECT statement."""
        for clause in _UNSUPPORTED_SELECT_CLAUSES:
            if stmt.args.get(clause):
                raise ParseError(f"Unsupported SELECT clause: {clause.upper()}")

        from_clause = stmt.find(exp.From)
        if from_clause is None:
            raise ParseError("SELECT requires FROM clause")

        tables = [self._table_name(from_clause.this)]
        for join in stmt.args.get("joins") or []:
            if join.args.get("on") or join.args.get("using") or join.side:
                raise ParseError("JOIN conditions are not supported, list tables with commas")
            tables.append(self._table_name(join.this))

        columns: list[ColumnRef] = []
        select_all = False
        for item in stmt.expressions:
            if isinstance(item, exp.Star):
                select_all = True
            elif isinstance(item, exp.Column) and not isinstance(item.this, exp.Star):
                columns.append(ColumnRef(name=item.name, table=item.table or None))
            else:
                raise ParseError(
                    f"Unsupported select item: {item.sql(dialect=self._dialect)}"
                )
        if select_all and columns:
            raise ParseError("'*' cannot be combined with named columns")

        predicate = None
        where = stmt.args.get("where")
        if where is not None:
            predicate = self._convert_predicate(where.this)

        return SelectCommand(
            tables=tuple(tables),
            columns=None if select_all else tuple(columns),
            predicate=predicate,
        )

    def _convert_delete(self, stmt: exp.Delete) -> DeleteCommand:
        """Convert a DELETE statement."""
        table = stmt.this if isinstance(stmt.this, exp.Table) else stmt.find(exp.Table)
        if table is None:
            raise ParseError("DELETE requires table name")

        where = stmt.args.get("where")
        if where is None:
            raise ParseError("DELETE requires a WHERE clause")

        return DeleteCommand(table=table.name, predicate=self._convert_predicate(where.this))

    def _table_name(self, node: exp.Expression | None) -> str:
        if not isinstance(node, exp.Table):
            raise ParseError("FROM accepts table names only")
        if node.alias:
            raise ParseError(f"Table aliases are not supported: {node.alias}")
        return node.name

    def _convert_predicate(self, expr: exp.Expression) -> Predicate:
        """Split a condition into equality terms, setting aside any other shape."""
        terms: list[Term] = []
        skipped: list[str] = []
        for conjunct in _flatten(expr, exp.And):
            term = self._convert_term(conjunct)
            if term is None:
                skipped.append(conjunct.sql(dialect=self._dialect))
            else:
                terms.append(term)
        return Predicate(terms=tuple(terms), skipped=tuple(skipped))

    def _convert_term(self, expr: exp.Expression) -> Term | None:
        alternatives = []
        for alt in _flatten(expr, exp.Or):
            equality = _convert_equality(alt)
            if equality is None:
                return None
            alternatives.append(equality)
        return Term(alternatives=tuple(alternatives))


def _unwrap(expr: exp.Expression) -> exp.Expression:
    while isinstance(expr, exp.Paren):
        expr = expr.this
    return expr


def _flatten(expr: exp.Expression, kind: type[exp.Expression]) -> list[exp.Expression]:
    """Flatten a left/right chain of ``kind`` nodes into its operands."""
    expr = _unwrap(expr)
    if isinstance(expr, kind):
        return _flatten(expr.left, kind) + _flatten(expr.right, kind)
    return [expr]


def _convert_equality(expr: exp.Expression) -> Equality | None:
    expr = _unwrap(expr)
    if not isinstance(expr, exp.EQ):
        return None

    left, right = _unwrap(expr.left), _unwrap(expr.right)
    if not isinstance(left, exp.Column) and isinstance(right, exp.Column):
        left, right = right, left
    if not isinstance(left, exp.Column) or isinstance(left.this, exp.Star):
        return None

    value = _literal_text(right)
    if value is None:
        return None
    return Equality(column=left.name, value=value, table=left.table or None)


def _literal_text(expr: exp.Expression) -> str | None:
    """Text of a literal value, or None if ``expr`` is not one.

    Unquoted words and double-quoted identifiers are taken as literal
    text, matching how values are written in the command language.
    NULL is stored as an empty field.
    """
    expr = _unwrap(expr)
    if isinstance(expr, exp.Literal):
        return expr.this
    if isinstance(expr, exp.Neg) and isinstance(expr.this, exp.Literal) and expr.this.is_number:
        return f"-{expr.this.this}"
    if isinstance(expr, exp.Boolean):
        return "TRUE" if expr.this else "FALSE"
    if isinstance(expr, exp.Null):
        return ""
    if isinstance(expr, exp.Column) and not expr.table and not isinstance(expr.this, exp.Star):
        return expr.name
    return None
