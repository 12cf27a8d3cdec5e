"""
Structured error types for tablemap.

Every failure the library raises itself is a :class:`TablemapError`. Errors
carry a category, a structured :class:`ErrorContext` naming the mapped type and
parameter involved, and an optional chained cause.

Manifesto:
    A malformed mapping is a programming-time defect, not a runtime
    condition. Mapping errors are raised the moment a type's shape is first
    analyzed and are never caught inside the library.

    - **Typed hierarchy:** one class per failure, grouped by category
    - **Rich context:** type and parameter names travel with the error
    - **Unwrapped driver errors:** database failures are the connection's
      business and propagate as the driver raised them

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        TablemapError                          │
        │              (category, context, cause)                       │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  MappingError (MAPPING)             QueryError (QUERY)        │
        │       │                                   │                   │
        │  PropertyMustHaveAType              InvalidOrder              │
        │  ArrayPropertyMustHaveATypeAnnotation  InvalidIdentifier      │
        │  ArrayPropertyMustHaveAnArrayAnnotation                       │
        │  PropertyHasNoGetter                                          │
        │  UnsupportedPropertyType                                      │
        │  MappedTypeNotFound                                           │
        │  CircularMapping                                              │
        │  NotAnEntity                                                  │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = PropertyHasNoGetter("shop.Invoice", "get_amount")
    >>> error.category
    <ErrorCategory.MAPPING: 'MAPPING'>
    >>> error.context.type_name
    'shop.Invoice'

Tags:
    error-handling, exception-hierarchy, mapping, tablemap
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification."""

    MAPPING = "MAPPING"           # Metadata derivation failures
    QUERY = "QUERY"               # Malformed criteria/order input
    CONFIG = "CONFIG"             # Missing or invalid settings
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        type_name: Fully-qualified name of the mapped type being analyzed
        parameter: Constructor parameter name, when one is involved
        metadata: Additional key-value pairs
    """

    type_name: str | None = None
    parameter: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["type_name", "parameter"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TablemapError(Exception):
    """
    Base exception for all tablemap errors.

    Subclasses set ``default_category`` to classify themselves. The
    ``context`` is filled by the raising site and can be extended fluently
    with :meth:`with_context`.

    Examples:
        >>> error = TablemapError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(type_name="shop.Invoice").context.type_name
        'shop.Invoice'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TablemapError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# MAPPING ERRORS (raised while deriving metadata)
# =============================================================================


class MappingError(TablemapError):
    """A mapped type's shape cannot be turned into metadata."""

    default_category = ErrorCategory.MAPPING


class PropertyMustHaveAType(MappingError):
    """A constructor parameter has no annotation."""

    def __init__(self, type_name: str, parameter: str):
        super().__init__(
            f"Property {type_name}::{parameter} must have a type",
            context=ErrorContext(type_name=type_name, parameter=parameter),
        )


class ArrayPropertyMustHaveATypeAnnotation(MappingError):
    """An untyped collection parameter is not described in the docstring."""

    def __init__(self, type_name: str, parameter: str):
        super().__init__(
            f"Array property {type_name}::{parameter} must have a type annotation, "
            f"document it with ':param Type[] {parameter}:'",
            context=ErrorContext(type_name=type_name, parameter=parameter),
        )


class ArrayPropertyMustHaveAnArrayAnnotation(MappingError):
    """The docstring names the parameter but its type has no element type."""

    def __init__(self, type_name: str, parameter: str, annotation: str):
        self.annotation = annotation
        super().__init__(
            f"Array property {type_name}::{parameter} must have an array annotation, "
            f"use {annotation}[] instead",
            context=ErrorContext(
                type_name=type_name,
                parameter=parameter,
                metadata={"annotation": annotation},
            ),
        )


class PropertyHasNoGetter(MappingError):
    """No accessor method was found for a property."""

    def __init__(self, type_name: str, getter: str, parameter: str | None = None):
        self.getter = getter
        super().__init__(
            f"Class {type_name} must have a method {getter}",
            context=ErrorContext(
                type_name=type_name,
                parameter=parameter,
                metadata={"getter": getter},
            ),
        )


class UnsupportedPropertyType(MappingError):
    """The annotation is a type that cannot be stored in a column."""

    def __init__(self, type_name: str, parameter: str, annotation: Any):
        super().__init__(
            f"Property {type_name}::{parameter} has unsupported type {annotation!r}",
            context=ErrorContext(type_name=type_name, parameter=parameter),
        )


class MappedTypeNotFound(MappingError):
    """A resolved type name does not point at an importable class."""

    def __init__(self, type_name: str, cause: Exception | None = None):
        super().__init__(
            f"Mapped type {type_name} could not be found",
            context=ErrorContext(type_name=type_name),
            cause=cause,
        )


class CircularMapping(MappingError):
    """Classification re-entered a type that is still being classified."""

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(
            "Circular mapping detected: " + " -> ".join(chain),
            context=ErrorContext(type_name=chain[-1], metadata={"chain": chain}),
        )


class NotAnEntity(MappingError):
    """A repository was requested for a type without an ``id`` property."""

    def __init__(self, type_name: str):
        super().__init__(
            f"{type_name} has no 'id' property and cannot be persisted on its own",
            context=ErrorContext(type_name=type_name),
        )


# =============================================================================
# QUERY ERRORS (raised while building SQL from caller input)
# =============================================================================


class QueryError(TablemapError):
    """Caller-supplied criteria or ordering cannot be turned into SQL."""

    default_category = ErrorCategory.QUERY


class InvalidOrder(QueryError):
    """An order specification names an unknown column or direction."""

    def __init__(self, message: str, *, type_name: str | None = None):
        super().__init__(message, context=ErrorContext(type_name=type_name))


class InvalidIdentifier(QueryError):
    """A table or column name is not a plain SQL identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Invalid SQL identifier: {identifier!r}")


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TablemapError",
    # Mapping
    "MappingError",
    "PropertyMustHaveAType",
    "ArrayPropertyMustHaveATypeAnnotation",
    "ArrayPropertyMustHaveAnArrayAnnotation",
    "PropertyHasNoGetter",
    "UnsupportedPropertyType",
    "MappedTypeNotFound",
    "CircularMapping",
    "NotAnEntity",
    # Query
    "QueryError",
    "InvalidOrder",
    "InvalidIdentifier",
]
