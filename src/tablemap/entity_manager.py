"""Entity manager: one repository per entity type, sharing a connection."""

from __future__ import annotations

from typing import Any

from tablemap.logging import get_logger
from tablemap.mapped import MappedRepository
from tablemap.metadata.introspection import qualified_name
from tablemap.protocols import Connection
from tablemap.repository import Repository

logger = get_logger(__name__)


class EntityManager:
    """Creates and caches repositories.

    Entity types without a registered repository class get a
    :class:`~tablemap.mapped.MappedRepository`. Related entities met while
    converting rows are loaded through this manager, so every type shares
    the same connection.
    """

    def __init__(
        self,
        connection: Connection,
        repositories: dict[type, type[Repository[Any]]] | None = None,
    ) -> None:
        self.connection = connection
        self._repository_classes: dict[type, type[Repository[Any]]] = dict(repositories or {})
        self._repositories: dict[type, Repository[Any]] = {}

    def register(self, entity_type: type, repository_class: type[Repository[Any]]) -> None:
        """Use ``repository_class`` for ``entity_type`` from now on."""
        self._repository_classes[entity_type] = repository_class
        self._repositories.pop(entity_type, None)

    def repository(self, entity_type: type) -> Repository[Any]:
        repository = self._repositories.get(entity_type)
        if repository is None:
            repository = self._create(entity_type)
            self._repositories[entity_type] = repository
        return repository

    def _create(self, entity_type: type) -> Repository[Any]:
        repository_class = self._repository_classes.get(entity_type)
        if repository_class is None:
            repository: Repository[Any] = MappedRepository(self.connection, self, entity_type)
        elif issubclass(repository_class, MappedRepository):
            repository = repository_class(self.connection, self, entity_type)
        else:
            repository = repository_class(self.connection, self)

        logger.debug(
            "repository_created",
            type=qualified_name(entity_type),
            repository=type(repository).__name__,
        )
        return repository


__all__ = [
    "EntityManager",
]
