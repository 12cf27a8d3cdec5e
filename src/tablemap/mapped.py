"""Repository whose capabilities come from derived entity metadata."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from tablemap.metadata.mapping import EntityMapping
from tablemap.protocols import Connection, RepositoryProvider, Row, Scalar
from tablemap.repository import Repository, T


class MappedRepository(Repository[T]):
    """Repository for an entity type described only by its constructor.

    Either pass ``entity_type`` or subclass and set it as a class attribute.
    ``accessors`` overrides accessor method names per property.

    Example::

        class InvoiceRepository(MappedRepository[Invoice]):
            entity_type = Invoice
            accessors = {"amount": "total"}
    """

    entity_type: ClassVar[type | None] = None
    accessors: ClassVar[Mapping[str, str]] = {}

    def __init__(
        self,
        connection: Connection,
        entity_manager: RepositoryProvider,
        entity_type: type | None = None,
    ) -> None:
        super().__init__(connection, entity_manager)
        mapped_type = entity_type or type(self).entity_type
        if mapped_type is None:
            raise TypeError(f"{type(self).__name__} needs an entity_type")
        self.mapping = EntityMapping.for_type(mapped_type, self.accessors)

    @property
    def table(self) -> str:
        return self.mapping.table

    @property
    def columns(self) -> str:
        return self.mapping.columns

    @property
    def bindings(self) -> str:
        return self.mapping.bindings

    @property
    def columns_equal_bindings(self) -> str:
        return self.mapping.columns_equal_bindings

    def load_by_id(self, id: Any) -> T | None:
        return super().load_by_id(self.mapping.identity_value(id))

    def get_order(self, order: Mapping[str, str] | None) -> dict[str, str]:
        return self.mapping.get_order(order)

    def delete_criteria(self, entity: T) -> dict[str, Any]:
        return self.mapping.delete_criteria(entity)

    def entity_to_database_row(self, entity: T) -> dict[str, Scalar]:
        return self.mapping.to_row(entity)

    def database_row_to_entity(self, row: Row) -> T:
        return self.mapping.from_row(row, self.em)


__all__ = [
    "MappedRepository",
]
