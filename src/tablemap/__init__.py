"""
tablemap - persistence for plain classes, derived from their constructors.

A class whose constructor takes an ``id`` is an entity with its own table; any
other mapped class is a value object embedded in the entity that holds it.
Column lists, SQL bindings and row conversion are all derived from the
constructor signature, so domain classes need no base class and no decorators.

Usage::

    from tablemap import EntityManager, create_connection

    em = EntityManager(create_connection("sqlite:///shop.db"))
    invoices = em.repository(Invoice)
    invoices.insert(invoice)
    unpaid = list(invoices.select({"paid": False}, order={"amount": "desc"}))
"""

__version__ = "0.1.0"

from tablemap.connection import SqlAlchemyConnection, create_connection
from tablemap.entity_manager import EntityManager
from tablemap.errors import MappingError, QueryError, TablemapError
from tablemap.mapped import MappedRepository
from tablemap.metadata import EntityMapping, PropertyDefinition, TypeClassifier, TypeKind
from tablemap.repository import Repository

__all__ = [
    "EntityManager",
    "EntityMapping",
    "MappedRepository",
    "MappingError",
    "PropertyDefinition",
    "QueryError",
    "Repository",
    "SqlAlchemyConnection",
    "TablemapError",
    "TypeClassifier",
    "TypeKind",
    "create_connection",
    "__version__",
]
