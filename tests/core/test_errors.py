"""Tests for tablemap.errors module."""

import pytest

from tablemap.errors import (
    ArrayPropertyMustHaveAnArrayAnnotation,
    ArrayPropertyMustHaveATypeAnnotation,
    CircularMapping,
    ErrorCategory,
    ErrorContext,
    InvalidIdentifier,
    InvalidOrder,
    MappedTypeNotFound,
    MappingError,
    NotAnEntity,
    PropertyHasNoGetter,
    PropertyMustHaveAType,
    QueryError,
    TablemapError,
    UnsupportedPropertyType,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.type_name is None
        assert ctx.parameter is None
        assert ctx.metadata == {}

    def test_to_dict_includes_set_fields(self):
        ctx = ErrorContext(type_name="shop.Invoice", metadata={"getter": "get_amount"})
        d = ctx.to_dict()
        assert d == {"type_name": "shop.Invoice", "getter": "get_amount"}
        assert "parameter" not in d


class TestTablemapError:
    """Test TablemapError base class."""

    def test_create_minimal_error(self):
        err = TablemapError("Something failed")
        assert err.message == "Something failed"
        assert str(err) == "Something failed"
        assert err.category == ErrorCategory.INTERNAL
        assert err.cause is None

    def test_create_with_cause(self):
        cause = ValueError("Invalid value")
        err = TablemapError("Mapping failed", cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause

    def test_with_context_fluent_api(self):
        err = TablemapError("Failed").with_context(type_name="shop.Order", column="lines")
        assert err.context.type_name == "shop.Order"
        assert err.context.metadata == {"column": "lines"}

    def test_to_dict(self):
        err = TablemapError("Failed", category=ErrorCategory.CONFIG).with_context(parameter="url")
        d = err.to_dict()
        assert d["error_type"] == "TablemapError"
        assert d["message"] == "Failed"
        assert d["category"] == "CONFIG"
        assert d["context"] == {"parameter": "url"}

    def test_repr(self):
        assert repr(TablemapError("boom")) == "TablemapError('boom', category=INTERNAL)"


class TestMappingErrors:
    """Messages and context of metadata-construction failures."""

    @pytest.mark.parametrize(
        "error",
        [
            PropertyMustHaveAType("shop.Invoice", "amount"),
            ArrayPropertyMustHaveATypeAnnotation("shop.Order", "lines"),
            ArrayPropertyMustHaveAnArrayAnnotation("shop.Order", "lines", "LineItem"),
            PropertyHasNoGetter("shop.Invoice", "get_amount"),
            UnsupportedPropertyType("shop.Invoice", "amount", dict),
            MappedTypeNotFound("shop.Ghost"),
            CircularMapping(["shop.A", "shop.B", "shop.A"]),
            NotAnEntity("shop.Money"),
        ],
    )
    def test_all_are_mapping_errors(self, error):
        assert isinstance(error, MappingError)
        assert isinstance(error, TablemapError)
        assert error.category == ErrorCategory.MAPPING

    def test_property_must_have_a_type(self):
        err = PropertyMustHaveAType("shop.Invoice", "amount")
        assert str(err) == "Property shop.Invoice::amount must have a type"
        assert err.context.type_name == "shop.Invoice"
        assert err.context.parameter == "amount"

    def test_array_must_have_type_annotation_names_the_parameter(self):
        err = ArrayPropertyMustHaveATypeAnnotation("shop.Order", "lines")
        assert "shop.Order::lines must have a type annotation" in str(err)

    def test_array_annotation_suggests_the_array_form(self):
        err = ArrayPropertyMustHaveAnArrayAnnotation("shop.Order", "lines", "LineItem")
        assert str(err).endswith("use LineItem[] instead")
        assert err.annotation == "LineItem"
        assert err.context.metadata["annotation"] == "LineItem"

    def test_no_getter_names_the_method(self):
        err = PropertyHasNoGetter("shop.Invoice", "is_paid or has_paid", "paid")
        assert str(err) == "Class shop.Invoice must have a method is_paid or has_paid"
        assert err.getter == "is_paid or has_paid"
        assert err.context.parameter == "paid"

    def test_mapped_type_not_found_chains_cause(self):
        cause = AttributeError("Ghost")
        err = MappedTypeNotFound("shop.Ghost", cause=cause)
        assert err.__cause__ is cause
        assert "shop.Ghost" in str(err)

    def test_circular_mapping_keeps_the_chain(self):
        err = CircularMapping(["shop.A", "shop.B", "shop.A"])
        assert err.chain == ["shop.A", "shop.B", "shop.A"]
        assert "shop.A -> shop.B -> shop.A" in str(err)
        assert err.context.type_name == "shop.A"


class TestQueryErrors:
    def test_invalid_order(self):
        err = InvalidOrder("bad direction", type_name="shop.Invoice")
        assert isinstance(err, QueryError)
        assert err.category == ErrorCategory.QUERY
        assert err.context.type_name == "shop.Invoice"

    def test_invalid_identifier(self):
        err = InvalidIdentifier("name; DROP TABLE x")
        assert err.identifier == "name; DROP TABLE x"
        assert err.category == ErrorCategory.QUERY
