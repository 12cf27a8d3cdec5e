"""
Canonical protocol definitions for tablemap.

The repository layer depends on shapes, not implementations: any object that
satisfies :class:`Connection` can back a repository, and any object that
satisfies :class:`RepositoryProvider` can resolve related entities while rows
are turned back into objects.

Architecture:
    ::

        protocols.py
        ├── RowIterator         : lazy, forward-only stream of row mappings
        ├── Connection          : execute(statement, bindings) / select(table, ...)
        └── RepositoryProvider  : repository(entity_type) lookup

    Implementations:
        Connection          → tablemap.connection.SqlAlchemyConnection
        RowIterator         → tablemap.connection.SqlAlchemyRowIterator
        RepositoryProvider  → tablemap.entity_manager.EntityManager

Tags:
    protocol, connection, repository, tablemap, contracts
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from tablemap.repository import Repository

Scalar = Union[str, int, float, bool, None]
Row = Mapping[str, Any]


@runtime_checkable
class RowIterator(Protocol):
    """
    Rows produced by one statement, in result-set order.

    Iteration yields one mapping of column name to scalar value per row.
    ``fetch()`` returns the next row, or ``None`` when the result is exhausted
    or the statement produced no result set at all.
    """

    def __iter__(self) -> Iterator[Row]:
        ...

    def fetch(self) -> Row | None:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Connection(Protocol):
    """
    Minimal statement-execution interface used by repositories.

    Statements use named ``:placeholder`` bindings. Failures are raised by
    the implementation and are never wrapped by callers.
    """

    def execute(self, statement: str, bindings: Mapping[str, Scalar] | None = None) -> RowIterator:
        """Execute a templated statement with named bindings."""
        ...

    def select(
        self,
        table: str,
        criteria: Mapping[str, Scalar] | None = None,
        order: Mapping[str, str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> RowIterator:
        """Select rows of ``table`` matching an equality conjunction of ``criteria``."""
        ...


class RepositoryProvider(Protocol):
    """Supplies the repository responsible for an entity type."""

    def repository(self, entity_type: type) -> Repository[Any]:
        ...


__all__ = [
    "Scalar",
    "Row",
    "RowIterator",
    "Connection",
    "RepositoryProvider",
]
