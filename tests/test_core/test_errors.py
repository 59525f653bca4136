"""Tests for taxonomy error kinds."""

from app.core.errors import (
    ConflictError,
    CycleError,
    HasChildrenError,
    HasLeafReferencesError,
    NotFoundError,
    TaxonomyError,
    TransactionError,
    ValidationError,
)


def test_codes_and_statuses_are_stable():
    expected = {
        ValidationError: ("VALIDATION_ERROR", 422),
        NotFoundError: ("NOT_FOUND", 404),
        CycleError: ("CYCLE_DETECTED", 409),
        HasChildrenError: ("HAS_CHILDREN", 409),
        HasLeafReferencesError: ("HAS_LEAF_REFERENCES", 409),
        ConflictError: ("CONFLICT", 409),
        TransactionError: ("TRANSACTION_ERROR", 500),
    }
    for error_class, (code, status_code) in expected.items():
        assert issubclass(error_class, TaxonomyError)
        assert error_class.code == code
        assert error_class.status_code == status_code


def test_cycle_error_names_descendant():
    error = CycleError(2, 3)
    assert error.message == "Node 3 is a descendant of node 2"
    assert error.details == {"id": 2, "parent_id": 3}


def test_cycle_error_self_parent():
    assert CycleError(4, 4).message == "Node 4 cannot be its own parent"


def test_has_children_details():
    error = HasChildrenError(1, "Electronics", ["Audio", "Phones"])

    assert error.children_count == 2
    assert error.to_dict() == {
        "success": False,
        "error": 'Cannot delete "Electronics": it has 2 child node(s): Audio, Phones',
        "code": "HAS_CHILDREN",
        "details": {"id": 1, "children_count": 2, "children_names": ["Audio", "Phones"]},
    }


def test_leaf_references_details():
    error = HasLeafReferencesError(
        2, "Phones", references_count=3, products_count=2, sample_products=["Pixel"]
    )
    assert error.details["references_count"] == 3
    assert error.details["products_count"] == 2
    assert error.details["sample_products"] == ["Pixel"]


def test_not_found_message():
    error = NotFoundError(999, "Parent category")
    assert str(error) == "Parent category 999 not found"
    assert error.details == {"id": 999}


def test_empty_details_serialize_as_none():
    assert ConflictError("duplicate").to_dict()["details"] is None
