"""
Entity mapping: the SQL fragments and row conversion derived from a classifier.

:class:`EntityMapping` is the build step between metadata and the generic
repository. From one entity's :class:`~tablemap.metadata.classifier.TypeClassifier`
it derives the table name, the flattened column list, the named bindings and
the two conversion functions between a database row and an entity instance.

Column layout, in constructor order:

=================================  ==========================================
Property                           Column(s)
=================================  ==========================================
scalar ``amount: float``           ``amount``
array ``lines: list[LineItem]``    ``lines`` (JSON text)
entity ``customer: Customer``      ``customer_id``
wrapper ``email: Email``           ``email`` (single scalar property)
value object ``address: Address``  ``address_street``, ``address_city``, ...
=================================  ==========================================

Inside JSON array columns, entities are stored as their ids and value objects
as objects keyed by property name.

Examples:
    >>> mapping = EntityMapping.for_type(Invoice)
    >>> mapping.columns
    'id, amount, customer_id, paid'
    >>> mapping.columns_equal_bindings
    'id = :id, amount = :amount, customer_id = :customer_id, paid = :paid'

Tags:
    mapping, sql, row-conversion, json, tablemap
"""

from __future__ import annotations

import inspect
import json
import re
from collections.abc import Iterator, Mapping
from typing import Any

from tablemap.errors import InvalidOrder, MappingError, NotAnEntity
from tablemap.logging import get_logger
from tablemap.metadata.classifier import IDENTITY_PROPERTY, TypeClassifier
from tablemap.metadata.property import PropertyDefinition
from tablemap.protocols import RepositoryProvider, Row

logger = get_logger(__name__)

ORDER_DIRECTIONS = ("ASC", "DESC")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_COERCIONS = {"int": int, "float": float, "str": str, "bool": bool}


def snake_case(name: str) -> str:
    """``LineItem`` -> ``line_item``; ``HTTPRequest`` -> ``http_request``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _coerce(tag: str, value: Any) -> Any:
    if value is None or tag not in _COERCIONS:
        return value
    return _COERCIONS[tag](value)


def _is_wrapper(classifier: TypeClassifier) -> bool:
    """Value object stored in one column: exactly one scalar, non-array property."""
    if classifier.is_entity or len(classifier.properties) != 1:
        return False
    only = classifier.properties[0]
    return only.nested is None and not only.is_array


def _stores_as_wrapper(prop: PropertyDefinition) -> bool:
    return prop.nested is not None and not prop.is_array and _is_wrapper(prop.nested)


def _scalar_of(prop: PropertyDefinition, value: Any) -> Any:
    """Collapse a single-scalar wrapper value to its scalar."""
    if value is None or not _stores_as_wrapper(prop):
        return value
    return prop.nested.properties[0].read(value)


def _identity_value(identity: PropertyDefinition, entity: Any) -> Any:
    """Column value of an entity's identity, wrapper ids collapsed."""
    return _scalar_of(identity, identity.read(entity))


def _bind(prop: PropertyDefinition, value: Any, args: list[Any], kwargs: dict[str, Any]) -> None:
    if prop.kind is inspect.Parameter.VAR_POSITIONAL:
        args.extend(value or ())
    elif prop.kind is inspect.Parameter.KEYWORD_ONLY:
        kwargs[prop.name] = value
    else:
        args.append(value)


class EntityMapping:
    """Table, columns and row conversion for one entity type."""

    def __init__(self, classifier: TypeClassifier, accessors: Mapping[str, str] | None = None):
        if not classifier.is_entity:
            raise NotAnEntity(classifier.name)

        self.classifier = classifier
        self.properties = self._apply_accessors(classifier, accessors or {})
        self.table: str = getattr(classifier.type, "__tablename__", None) or snake_case(
            classifier.type.__name__
        )
        self.column_names: tuple[str, ...] = tuple(self._columns(self.properties, ""))

        logger.debug(
            "mapping_built",
            type=classifier.name,
            table=self.table,
            columns=list(self.column_names),
        )

    @classmethod
    def for_type(cls, entity_type: type, accessors: Mapping[str, str] | None = None) -> EntityMapping:
        return cls(TypeClassifier.for_type(entity_type), accessors)

    @staticmethod
    def _apply_accessors(
        classifier: TypeClassifier, accessors: Mapping[str, str]
    ) -> tuple[PropertyDefinition, ...]:
        unknown = set(accessors) - {prop.name for prop in classifier.properties}
        if unknown:
            raise MappingError(
                f"Accessor overrides name unknown properties of {classifier.name}: "
                f"{', '.join(sorted(unknown))}"
            ).with_context(type_name=classifier.name)

        return tuple(
            prop.with_accessor(accessors[prop.name]) if prop.name in accessors else prop
            for prop in classifier.properties
        )

    # -- SQL fragments -------------------------------------------------------

    @property
    def identity(self) -> PropertyDefinition:
        return next(prop for prop in self.properties if prop.name == IDENTITY_PROPERTY)

    @property
    def columns(self) -> str:
        return ", ".join(self.column_names)

    @property
    def bindings(self) -> str:
        return ", ".join(f":{column}" for column in self.column_names)

    @property
    def columns_equal_bindings(self) -> str:
        return ", ".join(f"{column} = :{column}" for column in self.column_names)

    def _columns(self, properties: tuple[PropertyDefinition, ...], prefix: str) -> Iterator[str]:
        for prop in properties:
            column = prefix + prop.name
            if prop.is_array or prop.nested is None:
                yield column
            elif prop.is_entity:
                yield f"{column}_id"
            elif _is_wrapper(prop.nested):
                yield column
            else:
                yield from self._columns(prop.nested.properties, f"{column}_")

    def get_order(self, order: Mapping[str, str] | None) -> dict[str, str]:
        """Normalize an order specification to ``{column: "ASC" | "DESC"}``.

        Keys may be column names or top-level property names that map to a
        single column (``customer`` -> ``customer_id``).

        Raises:
            InvalidOrder: unknown column or direction.
        """
        normalized: dict[str, str] = {}
        for key, direction in (order or {}).items():
            column = self._order_column(key)
            value = str(direction).strip().upper()
            if value not in ORDER_DIRECTIONS:
                raise InvalidOrder(
                    f"Invalid order direction {direction!r} for {column}, use ASC or DESC",
                    type_name=self.classifier.name,
                )
            normalized[column] = value
        return normalized

    def _order_column(self, key: str) -> str:
        if key in self.column_names:
            return key
        for prop in self.properties:
            if prop.name == key:
                columns = list(self._columns((prop,), ""))
                if len(columns) == 1:
                    return columns[0]
        raise InvalidOrder(
            f"{self.table} has no column {key!r} to order by",
            type_name=self.classifier.name,
        )

    # -- Entity -> row -------------------------------------------------------

    def delete_criteria(self, entity: Any) -> dict[str, Any]:
        return {IDENTITY_PROPERTY: _identity_value(self.identity, entity)}

    def identity_value(self, id: Any) -> Any:
        """``id`` as bound in SQL: wrapper instances become their scalar."""
        identity = self.identity
        if _stores_as_wrapper(identity) and isinstance(id, identity.nested.type):
            return _scalar_of(identity, id)
        return id

    def to_row(self, entity: Any) -> dict[str, Any]:
        """Column values for ``entity``, read through its accessors."""
        row: dict[str, Any] = {}
        self._write(self.properties, entity, "", row)
        return row

    def _write(
        self,
        properties: tuple[PropertyDefinition, ...],
        obj: Any,
        prefix: str,
        row: dict[str, Any],
    ) -> None:
        for prop in properties:
            column = prefix + prop.name
            value = prop.read(obj)

            if prop.is_array:
                row[column] = None if value is None else json.dumps(self._dump_value(prop, value))
            elif prop.nested is None:
                row[column] = value
            elif value is None:
                for name in self._columns((prop,), prefix):
                    row[name] = None
            elif prop.is_entity:
                row[f"{column}_id"] = _identity_value(prop.nested.identity, value)
            elif _is_wrapper(prop.nested):
                row[column] = _scalar_of(prop, value)
            else:
                self._write(prop.nested.properties, value, f"{column}_", row)

    def _dump_value(self, prop: PropertyDefinition, value: Any) -> Any:
        if value is None:
            return None
        if prop.is_array:
            return [self._dump_item(prop, item) for item in value]
        return self._dump_item(prop, value)

    def _dump_item(self, prop: PropertyDefinition, item: Any) -> Any:
        if item is None or prop.nested is None:
            return item
        if prop.is_entity:
            return _identity_value(prop.nested.identity, item)
        return {
            inner.name: self._dump_value(inner, inner.read(item))
            for inner in prop.nested.properties
        }

    # -- Row -> entity -------------------------------------------------------

    def from_row(self, row: Row, provider: RepositoryProvider) -> Any:
        """Rebuild an entity from ``row``; related entities load through ``provider``."""
        return self._build(self.classifier.type, self.properties, row, "", provider)

    def _build(
        self,
        cls: type,
        properties: tuple[PropertyDefinition, ...],
        row: Row,
        prefix: str,
        provider: RepositoryProvider,
    ) -> Any:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for prop in properties:
            _bind(prop, self._read(prop, row, prefix, provider), args, kwargs)
        return cls(*args, **kwargs)

    def _read(self, prop: PropertyDefinition, row: Row, prefix: str, provider: RepositoryProvider) -> Any:
        column = prefix + prop.name

        if prop.is_array:
            raw = row[column]
            if raw is None:
                return None
            return [self._load_item(prop, item, provider) for item in json.loads(raw)]

        if prop.nested is None:
            return _coerce(prop.declared_type, row[column])

        if prop.is_entity:
            identity = row[f"{column}_id"]
            if identity is None:
                return None
            return provider.repository(prop.nested.type).load_by_id(identity)

        if _is_wrapper(prop.nested):
            raw = row[column]
            if raw is None:
                return None
            inner = prop.nested.properties[0]
            return self._construct(prop.nested, {inner.name: _coerce(inner.declared_type, raw)})

        if prop.nullable and all(row[name] is None for name in self._columns((prop,), prefix)):
            return None
        return self._build(prop.nested.type, prop.nested.properties, row, f"{column}_", provider)

    def _load_item(self, prop: PropertyDefinition, item: Any, provider: RepositoryProvider) -> Any:
        if item is None:
            return None
        if prop.nested is None:
            return _coerce(prop.element_type, item)
        if prop.is_entity:
            return provider.repository(prop.nested.type).load_by_id(item)

        values = {
            inner.name: self._load_value(inner, item.get(inner.name), provider)
            for inner in prop.nested.properties
        }
        return self._construct(prop.nested, values)

    def _load_value(self, prop: PropertyDefinition, value: Any, provider: RepositoryProvider) -> Any:
        if value is None:
            return None
        if prop.is_array:
            return [self._load_item(prop, item, provider) for item in value]
        return self._load_item(prop, value, provider)

    @staticmethod
    def _construct(classifier: TypeClassifier, values: Mapping[str, Any]) -> Any:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for prop in classifier.properties:
            _bind(prop, values.get(prop.name), args, kwargs)
        return classifier.type(*args, **kwargs)


__all__ = [
    "EntityMapping",
    "ORDER_DIRECTIONS",
    "snake_case",
]
