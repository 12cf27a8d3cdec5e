"""
Property analysis: one constructor parameter in, one PropertyDefinition out.

:class:`PropertyAnalyzer` derives everything the repository layer needs to
know about a constructor parameter, at the moment the owning type is first
classified and with no per-type configuration:

- the declared type tag (scalar, qualified class name, or ``X[]`` for arrays)
- whether the property is an array (typed collection or ``*args``)
- the accessor method that reads the value back for persistence
- a nested :class:`~tablemap.metadata.classifier.TypeClassifier` when the
  (element) type is itself a mapped class

Architecture:
    ::

        annotation ──► Optional[X]? Union[X, None]? ──► unwrap, nullable=True
                         │
                         ├── int / float / str / bool ──────────► "int"
                         ├── list[X], tuple[X, ...], Sequence[X] ► "pkg.X[]"
                         ├── list, tuple, Sequence (untyped) ────► docstring
                         │        ":param X[] name:"            ► "pkg.X[]"
                         │        ":param list<X> name:"        ► "pkg.X[]"
                         │        ":type name: list[X]"         ► "pkg.X[]"
                         ├── "X" (unresolved string) ───────────► name lookup
                         └── class X ───────────────────────────► "pkg.X"

        name lookup: owner module globals ─► imports before the class
                     definition ─► owner module path

Accessors are found by convention (``is_``/``has_`` for booleans, ``get_``
otherwise, ``__str__`` for single-value wrapper types) unless the owner class
names them explicitly in an ``__accessors__`` mapping.

Examples:
    >>> reflection = TypeReflection(Invoice)
    >>> [PropertyAnalyzer(reflection, p).analyze().declared_type
    ...  for p in reflection.parameters]
    ['int', 'float', 'shop.Customer', 'bool']

Guardrails:
    ❌ DON'T: Leave collection parameters undocumented
    ✅ DO: Annotate ``list[X]`` or document ``:param X[] name:``

    ❌ DON'T: Rely on attribute access for persistence
    ✅ DO: Expose ``get_<name>`` / ``is_<name>`` or declare ``__accessors__``

Tags:
    metadata, reflection, property, accessor, tablemap
"""

from __future__ import annotations

import builtins
import collections.abc
import dataclasses
import inspect
import re
import types
import typing
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tablemap.errors import (
    ArrayPropertyMustHaveAnArrayAnnotation,
    ArrayPropertyMustHaveATypeAnnotation,
    MappedTypeNotFound,
    PropertyHasNoGetter,
    PropertyMustHaveAType,
    UnsupportedPropertyType,
)
from tablemap.metadata.introspection import (
    ParameterInfo,
    TypeReflection,
    locate_type,
    qualified_name,
)

if TYPE_CHECKING:
    from tablemap.metadata.classifier import TypeClassifier

ARRAY_MARKER = "[]"
DEFAULT_ID_TYPE = "str"

SCALAR_TYPES: dict[type, str] = {int: "int", float: "float", str: "str", bool: "bool"}
SCALAR_TAGS = frozenset(SCALAR_TYPES.values())

_COLLECTION_TYPES = frozenset(
    {
        list,
        tuple,
        set,
        frozenset,
        collections.abc.Iterable,
        collections.abc.Collection,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
    }
)
_COLLECTION_NAMES = frozenset(
    {
        "list",
        "tuple",
        "set",
        "frozenset",
        "Iterable",
        "Collection",
        "Sequence",
        "MutableSequence",
        "Set",
        "List",
        "Tuple",
        "FrozenSet",
    }
)
_ANY_NAMES = frozenset({"Any", "typing.Any", "object"})

_NAME_WITH_ARGS = re.compile(r"^(?P<name>[A-Za-z_][\w.]*)\s*(?:\[(?P<args>.*)\])?$")
_ANGLE_GENERIC = re.compile(r"<(.*)>$")
_SQUARE_GENERIC = re.compile(r"^[\w.]+\[(.*)\]$")


def is_scalar_tag(tag: str) -> bool:
    return tag in SCALAR_TAGS


def is_array_tag(tag: str) -> bool:
    return tag.endswith(ARRAY_MARKER)


@dataclass(frozen=True)
class PropertyDefinition:
    """Derived metadata for one constructor parameter."""

    name: str
    declared_type: str
    accessor: str
    is_variadic: bool = False
    nullable: bool = False
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    nested: TypeClassifier | None = field(default=None, repr=False, compare=False)

    @property
    def is_array(self) -> bool:
        return is_array_tag(self.declared_type) or self.is_variadic

    @property
    def element_type(self) -> str:
        """Declared type with the array marker stripped."""
        return self.declared_type.removesuffix(ARRAY_MARKER)

    @property
    def is_entity(self) -> bool:
        return self.nested.is_entity if self.nested else False

    @property
    def is_value_object(self) -> bool:
        return self.nested.is_value_object if self.nested else False

    @property
    def id_type(self) -> str:
        id_type = self.nested.id_type if self.nested else None
        return id_type or DEFAULT_ID_TYPE

    def with_accessor(self, accessor: str) -> PropertyDefinition:
        """Copy of this definition reading through a different accessor."""
        return dataclasses.replace(self, accessor=accessor)

    def read(self, obj: Any) -> Any:
        """Read this property's value from ``obj`` through its accessor."""
        return getattr(obj, self.accessor)()


@dataclass(frozen=True)
class _ResolvedType:
    tag: str
    element: type | None = None
    nullable: bool = False


class PropertyAnalyzer:
    """Derives a :class:`PropertyDefinition` for one parameter of a class."""

    def __init__(self, reflection: TypeReflection, parameter: ParameterInfo):
        self.reflection = reflection
        self.parameter = parameter

    def analyze(self) -> PropertyDefinition:
        """Resolve type, nested classifier and accessor.

        Raises:
            PropertyMustHaveAType: the parameter is not annotated.
            ArrayPropertyMustHaveATypeAnnotation: untyped collection with no
                docstring entry for the parameter.
            ArrayPropertyMustHaveAnArrayAnnotation: the docstring entry has no
                recognizable element type.
            PropertyHasNoGetter: no accessor matches.
        """
        resolved = self._resolve_declared_type()

        return PropertyDefinition(
            name=self.parameter.name,
            declared_type=resolved.tag,
            accessor=self._find_accessor(resolved.tag),
            is_variadic=self.parameter.is_variadic,
            nullable=resolved.nullable,
            kind=self.parameter.kind,
            nested=self._nested_classifier(resolved),
        )

    # -- Type resolution -----------------------------------------------------

    def _resolve_declared_type(self) -> _ResolvedType:
        if not self.parameter.has_annotation:
            raise PropertyMustHaveAType(self.reflection.name, self.parameter.name)
        return self._resolve_annotation(self.parameter.annotation)

    def _resolve_annotation(self, annotation: Any) -> _ResolvedType:
        if isinstance(annotation, str):
            return self._resolve_string(annotation)
        if isinstance(annotation, typing.ForwardRef):
            return self._resolve_string(annotation.__forward_arg__)

        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)

        if origin is typing.Union or origin is types.UnionType:
            members = [arg for arg in args if arg is not type(None)]
            if len(members) != 1 or len(args) != 2:
                raise self._unsupported(annotation)
            return dataclasses.replace(self._resolve_annotation(members[0]), nullable=True)

        if annotation in SCALAR_TYPES:
            return _ResolvedType(SCALAR_TYPES[annotation])

        if (origin or annotation) in _COLLECTION_TYPES:
            if origin is tuple and args and (len(args) != 2 or args[1] is not Ellipsis):
                raise self._unsupported(annotation)
            element = args[0] if args else None
            if element is None or element is Any or element is Ellipsis:
                return self._resolve_documented_array()
            return self._as_array(self._resolve_annotation(element))

        if isinstance(annotation, type) and annotation.__module__ != "builtins":
            return _ResolvedType(qualified_name(annotation), element=annotation)

        raise self._unsupported(annotation)

    def _resolve_string(self, text: str) -> _ResolvedType:
        text = text.strip()

        members = _split_union(text)
        if len(members) == 2 and "None" in members:
            members.remove("None")
            return dataclasses.replace(self._resolve_string(members[0]), nullable=True)
        if len(members) > 1:
            raise self._unsupported(text)

        match = _NAME_WITH_ARGS.match(text)
        if match is None:
            raise self._unsupported(text)
        name, args = match.group("name"), match.group("args")

        if name in ("Optional", "typing.Optional") and args:
            return dataclasses.replace(self._resolve_string(args), nullable=True)

        if name in ("Union", "typing.Union") and args:
            members = _split_top_level(args, ",")
            if len(members) != 2 or "None" not in members:
                raise self._unsupported(text)
            members.remove("None")
            return dataclasses.replace(self._resolve_string(members[0]), nullable=True)

        if name.rpartition(".")[2] in _COLLECTION_NAMES:
            parts = _split_top_level(args or "", ",")
            if name.rpartition(".")[2] in ("tuple", "Tuple") and args and parts[1:] != ["..."]:
                raise self._unsupported(text)
            element = parts[0]
            if not element or element in _ANY_NAMES:
                return self._resolve_documented_array()
            return self._as_array(self._resolve_string(element))

        if args:
            raise self._unsupported(text)
        return self._resolve_token(name)

    def _resolve_documented_array(self) -> _ResolvedType:
        annotation = self._find_doc_annotation()
        token = self._element_token(annotation)
        return self._as_array(self._resolve_token(token))

    @staticmethod
    def _as_array(resolved: _ResolvedType) -> _ResolvedType:
        if is_array_tag(resolved.tag):
            return resolved
        return _ResolvedType(resolved.tag + ARRAY_MARKER, element=resolved.element)

    def _find_doc_annotation(self) -> str:
        docstring = self.reflection.docstring
        name = re.escape(self.parameter.name)
        patterns = (
            rf":param\s+(?P<type>[^:\n]*?)\s*\b{name}\s*:",
            rf":type\s+{name}\s*:\s*(?P<type>[^\n]+)",
            rf"^\s*\*{{0,2}}{name}\s*\((?P<type>[^)\n]*)\)\s*:",
        )
        for pattern in patterns:
            match = re.search(pattern, docstring, re.MULTILINE)
            if match and match.group("type").strip():
                return match.group("type").strip()

        raise ArrayPropertyMustHaveATypeAnnotation(self.reflection.name, self.parameter.name)

    def _element_token(self, annotation: str) -> str:
        if ARRAY_MARKER in annotation:
            token = annotation.replace(ARRAY_MARKER, "").strip()
        else:
            match = _ANGLE_GENERIC.search(annotation) or _SQUARE_GENERIC.match(annotation)
            token = match.group(1).split(",")[0].strip() if match else ""

        if not token or token in _ANY_NAMES:
            raise ArrayPropertyMustHaveAnArrayAnnotation(
                self.reflection.name, self.parameter.name, annotation
            )
        return token

    def _resolve_token(self, token: str) -> _ResolvedType:
        """Qualify a short or dotted type name the way the owner module sees it."""
        if is_scalar_tag(token):
            return _ResolvedType(token)

        head, _, rest = token.partition(".")
        namespace = self.reflection.namespace

        if head in namespace:
            target = namespace[head]
            try:
                for attribute in filter(None, rest.split(".")):
                    target = getattr(target, attribute)
            except AttributeError as exc:
                raise MappedTypeNotFound(token, cause=exc) from exc
            if not isinstance(target, type):
                raise self._unsupported(token)
            if target in SCALAR_TYPES:
                return _ResolvedType(SCALAR_TYPES[target])
            if target.__module__ == "builtins":
                raise self._unsupported(token)
            return _ResolvedType(qualified_name(target), element=target)

        for local, target_name in self.reflection.imports:
            if local == head:
                return _ResolvedType(f"{target_name}.{rest}" if rest else target_name)

        if hasattr(builtins, head):
            raise self._unsupported(token)

        if rest:
            return _ResolvedType(token)

        return _ResolvedType(f"{self.reflection.module_name}.{token}")

    def _unsupported(self, annotation: Any) -> UnsupportedPropertyType:
        return UnsupportedPropertyType(self.reflection.name, self.parameter.name, annotation)

    # -- Nested types --------------------------------------------------------

    def _nested_classifier(self, resolved: _ResolvedType) -> TypeClassifier | None:
        from tablemap.metadata.classifier import TypeClassifier

        element_tag = resolved.tag.removesuffix(ARRAY_MARKER)
        if is_scalar_tag(element_tag):
            return None

        mapped_type = resolved.element or locate_type(element_tag)
        return TypeClassifier.for_type(mapped_type)

    # -- Accessors -----------------------------------------------------------

    def _find_accessor(self, declared_type: str) -> str:
        name = self.parameter.name
        explicit = getattr(self.reflection.type, "__accessors__", {}).get(name)
        if explicit:
            if not self.reflection.defines(explicit):
                raise PropertyHasNoGetter(self.reflection.name, explicit, name)
            return explicit

        if declared_type == "bool":
            return self._find_boolean_accessor()

        getter = f"get_{name}"
        if self.reflection.defines(getter):
            return getter

        if len(self.reflection.parameters) == 1 and self.reflection.defines("__str__"):
            return "__str__"

        raise PropertyHasNoGetter(self.reflection.name, getter, name)

    def _find_boolean_accessor(self) -> str:
        name = self.parameter.name
        is_prefix = f"is_{name}"
        if self.reflection.defines(is_prefix):
            return is_prefix

        has_prefix = f"has_{name}"
        if self.reflection.defines(has_prefix):
            return has_prefix

        raise PropertyHasNoGetter(self.reflection.name, f"{is_prefix} or {has_prefix}", name)


def _split_union(text: str) -> list[str]:
    """Split ``A | B`` at top level, ignoring ``|`` inside brackets."""
    return _split_top_level(text, "|")


def _split_top_level(text: str, separator: str) -> list[str]:
    members, depth, current = [], 0, []
    for char in text:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        if char == separator and depth == 0:
            members.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    members.append("".join(current).strip())
    return members


def analyze_parameters(reflection: TypeReflection) -> tuple[PropertyDefinition, ...]:
    """Analyze every constructor parameter of ``reflection``, in order."""
    return tuple(PropertyAnalyzer(reflection, parameter).analyze() for parameter in reflection.parameters)


__all__ = [
    "ARRAY_MARKER",
    "DEFAULT_ID_TYPE",
    "SCALAR_TAGS",
    "PropertyAnalyzer",
    "PropertyDefinition",
    "analyze_parameters",
    "is_array_tag",
    "is_scalar_tag",
]
