"""
Metadata derivation: constructor signatures in, mapping descriptions out.

- ``introspection`` -- what may be known about a class (parameters, docs, imports)
- ``property``      -- one parameter to one PropertyDefinition
- ``classifier``    -- entity or value object, memoized per type
- ``mapping``       -- table, columns, bindings and row conversion for an entity
"""

from tablemap.metadata.classifier import IDENTITY_PROPERTY, TypeClassifier, TypeKind, clear_classifier_cache
from tablemap.metadata.introspection import ParameterInfo, TypeReflection, locate_type, qualified_name
from tablemap.metadata.mapping import EntityMapping, snake_case
from tablemap.metadata.property import PropertyAnalyzer, PropertyDefinition, analyze_parameters

__all__ = [
    "IDENTITY_PROPERTY",
    "EntityMapping",
    "ParameterInfo",
    "PropertyAnalyzer",
    "PropertyDefinition",
    "TypeClassifier",
    "TypeKind",
    "TypeReflection",
    "analyze_parameters",
    "clear_classifier_cache",
    "locate_type",
    "qualified_name",
    "snake_case",
]
