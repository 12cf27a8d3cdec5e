"""SQLAlchemy-backed connection satisfying :class:`tablemap.protocols.Connection`.

This module provides:

* ``create_connection``       -- Build an engine from a URL (or settings) and
  wrap one autocommit connection.
* ``SqlAlchemyConnection``    -- ``execute`` templated statements through
  ``sqlalchemy.text()`` with named bindings; ``select`` by equality criteria.
* ``SqlAlchemyRowIterator``   -- Lazy stream of row dicts over a SQLAlchemy
  ``Result``.
* ``build_select``            -- The ``SELECT`` statement and bindings behind
  ``select``.

Statements are executed as given; driver errors propagate unmodified.

Tags:
    tablemap, sqlalchemy, connection, engine, row-iterator

Doc-Types:
    api-reference
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.engine import Engine, Result
from sqlalchemy.pool import StaticPool

from tablemap.errors import InvalidIdentifier, InvalidOrder
from tablemap.logging import get_logger
from tablemap.protocols import Row, Scalar
from tablemap.settings import TablemapSettings, get_settings

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

# SQLite and MySQL reject OFFSET without LIMIT.
_UNBOUNDED_LIMIT = {"sqlite": -1, "mysql": 18446744073709551615}


def _identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise InvalidIdentifier(name)
    return name


def build_select(
    table: str,
    criteria: Mapping[str, Scalar] | None = None,
    order: Mapping[str, str] | None = None,
    limit: int | None = None,
    offset: int | None = None,
    *,
    dialect: str = "",
) -> tuple[str, dict[str, Scalar]]:
    """Return ``(statement, bindings)`` for an equality-criteria select.

    ``None`` criteria values compare with ``IS NULL``.

    Raises:
        InvalidIdentifier: table or column name is not a plain identifier.
        InvalidOrder: direction is not ``ASC`` or ``DESC``.
    """
    statement = f"SELECT * FROM {_identifier(table)}"
    bindings: dict[str, Scalar] = {}

    conditions = []
    for position, (column, value) in enumerate((criteria or {}).items()):
        _identifier(column)
        if value is None:
            conditions.append(f"{column} IS NULL")
        else:
            key = f"w{position}"
            conditions.append(f"{column} = :{key}")
            bindings[key] = value
    if conditions:
        statement += " WHERE " + " AND ".join(conditions)

    if order:
        clauses = []
        for column, direction in order.items():
            direction = direction.upper()
            if direction not in ("ASC", "DESC"):
                raise InvalidOrder(f"Invalid order direction {direction!r} for {column}, use ASC or DESC")
            clauses.append(f"{_identifier(column)} {direction}")
        statement += " ORDER BY " + ", ".join(clauses)

    if limit is None and offset is not None and dialect in _UNBOUNDED_LIMIT:
        limit = _UNBOUNDED_LIMIT[dialect]
    if limit is not None:
        statement += " LIMIT :limit"
        bindings["limit"] = limit
    if offset is not None:
        statement += " OFFSET :offset"
        bindings["offset"] = offset

    return statement, bindings


class SqlAlchemyRowIterator:
    """Rows of one SQLAlchemy ``Result`` as plain dicts, pulled on demand.

    Statements without a result set (INSERT, UPDATE, DDL) produce an empty
    iterator: ``fetch()`` returns ``None`` and iteration stops immediately.
    """

    def __init__(self, result: Result[Any]) -> None:
        self._result = result
        self._rows = result.mappings() if result.returns_rows else None
        self.closed = False

    def __iter__(self) -> Iterator[Row]:
        while (row := self.fetch()) is not None:
            yield row

    def __enter__(self) -> SqlAlchemyRowIterator:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def fetch(self) -> Row | None:
        if self._rows is None or self.closed:
            return None
        row = self._rows.fetchone()
        return dict(row) if row is not None else None

    def close(self) -> None:
        if not self.closed:
            self._result.close()
            self.closed = True


class SqlAlchemyConnection:
    """Adapter that makes a SQLAlchemy ``Connection`` look like ``tablemap.protocols.Connection``.

    Implements: ``execute``, ``select``, ``commit``, ``rollback``, ``close``.
    """

    def __init__(self, connection: SAConnection, *, owns_engine: bool = False) -> None:
        self._connection = connection
        self.owns_engine = owns_engine

    @property
    def engine(self) -> Engine:
        return self._connection.engine

    @property
    def dialect(self) -> str:
        return self._connection.dialect.name

    # --- statements ---

    def execute(self, statement: str, bindings: Mapping[str, Scalar] | None = None) -> SqlAlchemyRowIterator:
        result = self._connection.execute(text(statement), dict(bindings or {}))
        return SqlAlchemyRowIterator(result)

    def select(
        self,
        table: str,
        criteria: Mapping[str, Scalar] | None = None,
        order: Mapping[str, str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> SqlAlchemyRowIterator:
        statement, bindings = build_select(table, criteria, order, limit, offset, dialect=self.dialect)
        return self.execute(statement, bindings)

    # --- transaction ---

    def commit(self) -> None:
        self._connection.commit()

    def rollback(self) -> None:
        self._connection.rollback()

    def close(self) -> None:
        engine = self._connection.engine
        self._connection.close()
        if self.owns_engine:
            engine.dispose()

    def __enter__(self) -> SqlAlchemyConnection:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def create_connection(
    url: str | None = None,
    *,
    echo: bool | None = None,
    settings: TablemapSettings | None = None,
    **kwargs: Any,
) -> SqlAlchemyConnection:
    """Create an engine and return an autocommit :class:`SqlAlchemyConnection`.

    Parameters
    ----------
    url:
        Database URL; defaults to ``settings.database_url``.
    echo:
        Echo SQL through the engine logger; defaults to ``settings.echo_sql``.
    settings:
        Settings to read defaults from; :func:`get_settings` when omitted.
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    settings = settings or get_settings()
    url = url or settings.database_url
    echo = settings.echo_sql if echo is None else echo

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs.setdefault("poolclass", StaticPool)

    engine = create_engine(url, echo=echo, **kwargs)
    connection = engine.connect().execution_options(isolation_level="AUTOCOMMIT")

    logger.info("connection_created", dialect=engine.dialect.name, url=engine.url.render_as_string())
    return SqlAlchemyConnection(connection, owns_engine=True)


__all__ = [
    "SqlAlchemyConnection",
    "SqlAlchemyRowIterator",
    "build_select",
    "create_connection",
]
