"""
Introspection facility: what the metadata engine is allowed to know about a class.

:class:`TypeReflection` wraps one class and answers the questions the
property analyzer asks: the constructor's parameters (name, annotation, kind),
the documentation text, the import statements that precede the class
definition, the methods the class defines, and the module it lives in.

Annotations are resolved with :func:`typing.get_type_hints` when every name
is resolvable at runtime. When one is not (typically a name imported only
under ``if TYPE_CHECKING:``), the raw string annotations are kept and the
analyzer resolves them through the same import lookup used for docstrings.

Imports are read structurally: the owning module's source is parsed with
:mod:`ast` and only import statements located before the class definition are
considered, including those nested in ``if TYPE_CHECKING:`` blocks.

Tags:
    introspection, reflection, inspect, ast, tablemap
"""

from __future__ import annotations

import ast
import importlib
import importlib.util
import inspect
import sys
import typing
from dataclasses import dataclass
from functools import cached_property
from types import ModuleType
from typing import Any

from tablemap.errors import MappedTypeNotFound


def qualified_name(cls: type) -> str:
    """Return ``module.Qualname`` for ``cls``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def locate_type(name: str) -> type:
    """Import and return the class named by a fully-qualified ``name``.

    The longest importable module prefix wins; the remaining segments are
    looked up as attributes, which supports nested classes.

    Raises:
        MappedTypeNotFound: no module prefix imports, an attribute is
            missing, or the target is not a class.
    """
    parts = name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue

        try:
            for attribute in parts[split:]:
                target = getattr(target, attribute)
        except AttributeError as exc:
            raise MappedTypeNotFound(name, cause=exc) from exc

        if not isinstance(target, type):
            raise MappedTypeNotFound(name)
        return target

    raise MappedTypeNotFound(name)


@dataclass(frozen=True)
class ParameterInfo:
    """One constructor parameter as seen by the analyzer."""

    name: str
    annotation: Any
    kind: inspect._ParameterKind

    @property
    def has_annotation(self) -> bool:
        return self.annotation is not inspect.Parameter.empty

    @property
    def is_variadic(self) -> bool:
        return self.kind is inspect.Parameter.VAR_POSITIONAL


class TypeReflection:
    """Read-only view over a class used to derive its mapping metadata."""

    def __init__(self, cls: type):
        self.type = cls

    def __repr__(self) -> str:
        return f"TypeReflection({self.name})"

    @property
    def name(self) -> str:
        return qualified_name(self.type)

    @property
    def module_name(self) -> str:
        return self.type.__module__

    @property
    def module(self) -> ModuleType | None:
        return sys.modules.get(self.module_name)

    @cached_property
    def parameters(self) -> tuple[ParameterInfo, ...]:
        """Constructor parameters in declaration order, ``**kwargs`` excluded."""
        signature = inspect.signature(self.type)
        hints = self._type_hints()

        return tuple(
            ParameterInfo(
                name=parameter.name,
                annotation=hints.get(parameter.name, parameter.annotation),
                kind=parameter.kind,
            )
            for parameter in signature.parameters.values()
            if parameter.kind is not inspect.Parameter.VAR_KEYWORD
        )

    def _type_hints(self) -> dict[str, Any]:
        try:
            return typing.get_type_hints(self.type.__init__)
        except (NameError, TypeError):
            return {}

    @cached_property
    def docstring(self) -> str:
        """Constructor docstring followed by the class docstring."""
        docs = []
        init = self.type.__dict__.get("__init__")
        if init is not None and init.__doc__:
            docs.append(inspect.cleandoc(init.__doc__))
        if self.type.__doc__:
            docs.append(inspect.cleandoc(self.type.__doc__))
        return "\n".join(docs)

    @property
    def namespace(self) -> dict[str, Any]:
        """Globals of the module defining the class."""
        module = self.module
        return vars(module) if module is not None else {}

    @cached_property
    def imports(self) -> tuple[tuple[str, str], ...]:
        """``(local_name, target)`` pairs imported before the class definition.

        ``from a.b import C as D`` yields ``("D", "a.b.C")``;
        ``import a.b`` yields ``("a", "a")``; ``import a.b as ab`` yields
        ``("ab", "a.b")``.
        """
        tree, start_line = self._parse_module()
        if tree is None:
            return ()

        found: list[tuple[int, str, str]] = []
        for node in ast.walk(tree):
            if getattr(node, "lineno", start_line) >= start_line:
                continue
            if isinstance(node, ast.ImportFrom):
                module = self._absolute_module(node)
                for alias in node.names:
                    found.append((node.lineno, alias.asname or alias.name, f"{module}.{alias.name}"))
            elif isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        found.append((node.lineno, alias.asname, alias.name))
                    else:
                        head = alias.name.split(".")[0]
                        found.append((node.lineno, head, head))

        found.sort(key=lambda item: item[0])
        return tuple((local, target) for _, local, target in found)

    def _parse_module(self) -> tuple[ast.Module | None, int]:
        module = self.module
        if module is None:
            return None, 0
        try:
            source = inspect.getsource(module)
            _, start_line = inspect.getsourcelines(self.type)
        except (OSError, TypeError):
            return None, 0
        try:
            return ast.parse(source), start_line
        except SyntaxError:
            return None, 0

    def _absolute_module(self, node: ast.ImportFrom) -> str:
        if not node.level:
            return node.module or ""
        package = getattr(self.module, "__package__", None) or self.module_name.rpartition(".")[0]
        relative = "." * node.level + (node.module or "")
        return importlib.util.resolve_name(relative, package)

    def defines(self, method: str) -> bool:
        """True if the class (or a base other than ``object``) defines a callable ``method``."""
        for klass in self.type.__mro__:
            if klass is object:
                continue
            if method in vars(klass):
                return callable(getattr(self.type, method, None))
        return False


__all__ = [
    "ParameterInfo",
    "TypeReflection",
    "locate_type",
    "qualified_name",
]
