"""Generic CRUD repository over a statement-executing connection.

Provides :class:`Repository`, an abstract base class that turns a handful of
per-entity capabilities (table name, column list, bindings, row conversion)
into the full set of load, select, insert, update and delete operations.
The SQL it issues is fixed; everything entity-specific comes from the
abstract members, usually supplied by
:class:`~tablemap.mapped.MappedRepository` from derived metadata.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                         Repository[T]                              │
    │                                                                    │
    │   connection: Connection   ← protocol from tablemap.protocols      │
    │   em: RepositoryProvider   ← resolves related entity repositories  │
    │                                                                    │
    │   load_by_id(id)           → T | None                              │
    │   load_by(criteria, order) → T | None                              │
    │   load_by_query(sql, b)    → T | None                              │
    │   exists(criteria)         → bool                                  │
    │   select(...)              → Iterator[T]   (lazy)                  │
    │   select_by_query(sql, b)  → Iterator[T]   (lazy)                  │
    │   insert / update / delete (*entities)                             │
    └────────────────────────────────────────────────────────────────────┘

Statements::

    INSERT INTO <table> (<columns>) VALUES (<bindings>)
    UPDATE <table> SET <column = :binding, ...> WHERE id = :id
    DELETE FROM <table> WHERE id = :id

Connection failures propagate unmodified. There is no retry, no batching and
no implicit transaction; each entity is one statement, in argument order.

Usage:
    >>> repo = em.repository(Invoice)
    >>> repo.insert(Invoice(1, 12.5, customer, False))
    >>> repo.load_by_id(1).get_amount()
    12.5

Tags:
    repository, crud, sql, lazy-iteration, tablemap
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Generic, TypeVar

from tablemap.logging import get_logger
from tablemap.protocols import Connection, RepositoryProvider, Row, RowIterator, Scalar

logger = get_logger(__name__)

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """CRUD operations for one entity type.

    Parameters:
        connection: Any object satisfying the :class:`Connection` protocol.
        entity_manager: Resolves repositories for related entities while
            rows are converted back into objects.
    """

    def __init__(self, connection: Connection, entity_manager: RepositoryProvider) -> None:
        self.connection = connection
        self.em = entity_manager

    # -- Entity-specific capabilities --------------------------------------

    @property
    @abstractmethod
    def table(self) -> str:
        ...

    @property
    @abstractmethod
    def columns(self) -> str:
        """Comma-separated column list, e.g. ``id, amount, customer_id``."""

    @property
    @abstractmethod
    def bindings(self) -> str:
        """Comma-separated named bindings matching :attr:`columns`."""

    @property
    @abstractmethod
    def columns_equal_bindings(self) -> str:
        """``column = :column`` pairs for UPDATE."""

    @abstractmethod
    def get_order(self, order: Mapping[str, str] | None) -> dict[str, str]:
        ...

    @abstractmethod
    def delete_criteria(self, entity: T) -> dict[str, Scalar]:
        ...

    @abstractmethod
    def entity_to_database_row(self, entity: T) -> dict[str, Scalar]:
        ...

    @abstractmethod
    def database_row_to_entity(self, row: Row) -> T:
        ...

    # -- Loading -----------------------------------------------------------

    def load_by_id(self, id: Scalar) -> T | None:
        return self.load_by({"id": id})

    def load_by(self, criteria: Mapping[str, Scalar], order: Mapping[str, str] | None = None) -> T | None:
        """First entity matching ``criteria`` in ``order``, or ``None``."""
        return self.select_one(criteria, order)

    def load_by_query(self, query: str, bindings: Mapping[str, Scalar] | None = None) -> T | None:
        """Entity built from the first row of a raw query, or ``None``.

        Statements that produce no result set also yield ``None``.
        """
        rows = self._execute(query, bindings)
        try:
            row = rows.fetch()
        finally:
            rows.close()
        return self.database_row_to_entity(row) if row is not None else None

    def select_one(self, criteria: Mapping[str, Scalar], order: Mapping[str, str] | None = None) -> T | None:
        entities = self.select(criteria, order, limit=1)
        try:
            return next(entities, None)
        finally:
            entities.close()

    def exists(self, criteria: Mapping[str, Scalar] | None = None) -> bool:
        rows = self.connection.select(self.table, criteria, limit=1)
        try:
            return rows.fetch() is not None
        finally:
            rows.close()

    def select(
        self,
        criteria: Mapping[str, Scalar] | None = None,
        order: Mapping[str, str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Iterator[T]:
        """Lazily yield entities matching ``criteria``.

        The order is validated immediately; the query runs on the first step.
        One row is converted per step, and the row iterator is closed when
        iteration finishes or the generator is closed early.
        """
        normalized = self.get_order(order)
        return self._entities(lambda: self.connection.select(self.table, criteria, normalized, limit, offset))

    def select_by_query(self, query: str, bindings: Mapping[str, Scalar] | None = None) -> Iterator[T]:
        """Lazily yield entities built from the rows of a raw query."""
        return self._entities(lambda: self._execute(query, bindings))

    def _entities(self, open_rows: Callable[[], RowIterator]) -> Iterator[T]:
        rows = open_rows()
        try:
            for row in rows:
                yield self.database_row_to_entity(row)
        finally:
            rows.close()

    # -- Persistence -------------------------------------------------------

    def insert(self, *entities: T) -> None:
        statement = f"INSERT INTO {self.table} ({self.columns}) VALUES ({self.bindings})"
        for entity in entities:
            self._execute_and_close(statement, self.entity_to_database_row(entity))

    def update(self, *entities: T) -> None:
        statement = f"UPDATE {self.table} SET {self.columns_equal_bindings} WHERE id = :id"
        for entity in entities:
            self._execute_and_close(statement, self.entity_to_database_row(entity))

    def delete(self, *entities: T) -> None:
        statement = f"DELETE FROM {self.table} WHERE id = :id"
        for entity in entities:
            self._execute_and_close(statement, self.delete_criteria(entity))

    # -- Execution ---------------------------------------------------------

    def _execute(self, statement: str, bindings: Mapping[str, Scalar] | None) -> RowIterator:
        logger.debug(
            "statement_executed",
            table=self.table,
            statement=statement,
            bindings=sorted(bindings) if bindings else [],
        )
        return self.connection.execute(statement, bindings)

    def _execute_and_close(self, statement: str, bindings: Mapping[str, Scalar]) -> None:
        self._execute(statement, bindings).close()


__all__ = [
    "Repository",
]
