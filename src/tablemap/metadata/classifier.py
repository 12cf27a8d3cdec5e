"""
Type classification: entity or value object.

A :class:`TypeClassifier` walks a class's constructor through
:class:`~tablemap.metadata.property.PropertyAnalyzer` and decides, purely
structurally, whether the class is an entity (it has a property literally
named ``id``) or a value object (it has not). Classification recurses through
nested mapped types, so classifying ``Invoice`` also classifies ``Customer``.

Classifiers are memoized process-wide by fully-qualified type name; the first
classification of a type wins. Re-entering a type that is still being
classified on the current thread raises :class:`~tablemap.errors.CircularMapping`
instead of recursing forever.

Examples:
    >>> classifier = TypeClassifier.for_type(Invoice)
    >>> classifier.kind
    <TypeKind.ENTITY: 'entity'>
    >>> classifier.property("customer").nested is TypeClassifier.for_type(Customer)
    True

Tags:
    metadata, classification, entity, value-object, tablemap
"""

from __future__ import annotations

import threading
from enum import Enum

from tablemap.errors import CircularMapping
from tablemap.logging import get_logger
from tablemap.metadata.introspection import TypeReflection, qualified_name
from tablemap.metadata.property import PropertyDefinition, analyze_parameters

logger = get_logger(__name__)

IDENTITY_PROPERTY = "id"


class TypeKind(str, Enum):
    """What a mapped type is, as far as persistence is concerned."""

    ENTITY = "entity"
    VALUE_OBJECT = "value_object"


_classifiers: dict[str, TypeClassifier] = {}
_classifiers_lock = threading.Lock()
_local = threading.local()


def _in_progress() -> list[str]:
    if not hasattr(_local, "chain"):
        _local.chain = []
    return _local.chain


def clear_classifier_cache() -> None:
    """Forget every memoized classification."""
    with _classifiers_lock:
        _classifiers.clear()


class TypeClassifier:
    """Classification and property list of one mapped type.

    Prefer :meth:`for_type`; constructing directly bypasses the memo and the
    cycle check for the outermost type.
    """

    def __init__(self, reflection: TypeReflection):
        self.reflection = reflection
        self.properties: tuple[PropertyDefinition, ...] = analyze_parameters(reflection)
        self.identity: PropertyDefinition | None = next(
            (prop for prop in self.properties if prop.name == IDENTITY_PROPERTY),
            None,
        )

    @classmethod
    def for_type(cls, mapped_type: type) -> TypeClassifier:
        """Return the memoized classifier for ``mapped_type``, building it on first use."""
        name = qualified_name(mapped_type)

        cached = _classifiers.get(name)
        if cached is not None:
            return cached

        chain = _in_progress()
        if name in chain:
            raise CircularMapping(chain[chain.index(name):] + [name])

        chain.append(name)
        try:
            classifier = cls(TypeReflection(mapped_type))
        finally:
            chain.pop()

        with _classifiers_lock:
            classifier = _classifiers.setdefault(name, classifier)

        logger.debug(
            "type_classified",
            type=name,
            kind=classifier.kind.value,
            properties=[prop.name for prop in classifier.properties],
        )
        return classifier

    def __repr__(self) -> str:
        return f"TypeClassifier({self.name}, kind={self.kind.value})"

    @property
    def type(self) -> type:
        return self.reflection.type

    @property
    def name(self) -> str:
        return self.reflection.name

    @property
    def kind(self) -> TypeKind:
        return TypeKind.ENTITY if self.identity is not None else TypeKind.VALUE_OBJECT

    @property
    def is_entity(self) -> bool:
        return self.kind is TypeKind.ENTITY

    @property
    def is_value_object(self) -> bool:
        return self.kind is TypeKind.VALUE_OBJECT

    @property
    def id_type(self) -> str | None:
        """Declared type of the identity property, ``None`` for value objects."""
        return self.identity.declared_type if self.identity else None

    def property(self, name: str) -> PropertyDefinition:
        """Return the property called ``name``.

        Raises:
            KeyError: the type has no such constructor parameter.
        """
        for prop in self.properties:
            if prop.name == name:
                return prop
        raise KeyError(f"{self.name} has no property {name!r}")


__all__ = [
    "IDENTITY_PROPERTY",
    "TypeClassifier",
    "TypeKind",
    "clear_classifier_cache",
]
