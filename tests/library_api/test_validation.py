"""
Tests for identifier and payload validation.
"""

from datetime import datetime, timezone

import pytest
from bson import ObjectId

from library_api.exceptions import InvalidIdentifier, InvalidPayload
from library_api.models import AuthorCreate, AuthorUpdate, BookCreate, BookUpdate
from library_api.validation import validate_object_id, validate_payload


class TestValidateObjectId:
    """Test cases for the identifier validator."""

    def test_accepts_object_id(self):
        validate_object_id(str(ObjectId()))

    @pytest.mark.parametrize("identifier", [
        "not-a-valid-id-format",
        "123",
        "abcdefghijkl",
        "z" * 24,
        "",
        None,
    ])
    def test_rejects_malformed_ids(self, identifier):
        with pytest.raises(InvalidIdentifier) as exc_info:
            validate_object_id(identifier)

        assert exc_info.value.message == "Please enter a valid id"
        assert exc_info.value.status_code == 400


class TestValidatePayload:
    """Test cases for the schema-driven payload validator."""

    def test_returns_only_supplied_fields(self):
        fields = validate_payload(AuthorUpdate, {"country": "Turkey"}, "Update")
        assert fields == {"country": "Turkey"}

    def test_trims_text_and_parses_dates(self):
        fields = validate_payload(
            AuthorCreate,
            {"name": "  John Doe  ", "birthDate": "1980-01-01T00:00:00.000Z"},
            "Create",
        )
        assert fields["name"] == "John Doe"
        assert fields["birthDate"] == datetime(1980, 1, 1, tzinfo=timezone.utc)

    def test_unknown_field_rejected(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(AuthorUpdate, {"nickname": "JD"}, "Update")

        assert exc_info.value.message == (
            'Update operation not completed successfully, because "nickname" is not allowed'
        )
        assert exc_info.value.field == "nickname"

    def test_wrong_type_rejected(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(BookUpdate, {"price": "cheap"}, "Update")

        assert exc_info.value.message.endswith('"price" must be a number')

    def test_fractional_page_count_rejected(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(BookUpdate, {"numberOfPages": 223.5}, "Update")

        assert '"numberOfPages" must be an integer' in exc_info.value.message

    def test_missing_required_field_on_create(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(AuthorCreate, {"country": "USA"}, "Create")

        assert exc_info.value.message == (
            'Create operation not completed successfully, because "name" is required'
        )

    def test_blank_title_rejected(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(BookCreate, {"title": "   ", "author": str(ObjectId())}, "Create")

        assert '"title" is not allowed to be empty' in exc_info.value.message

    def test_null_rejected_for_optional_field(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(AuthorUpdate, {"country": None}, "Update")

        assert '"country" must not be null' in exc_info.value.message

    def test_book_author_must_be_object_id(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(BookCreate, {"title": "Dune", "author": "frank"}, "Create")

        assert '"author" must be a valid id' in exc_info.value.message

    def test_non_object_body_rejected(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(BookUpdate, ["price", 10], "Update")

        assert "request body must be an object" in exc_info.value.message

    def test_empty_update_is_valid(self):
        assert validate_payload(BookUpdate, {}, "Update") == {}


class TestBookNumberFields:
    """Test cases for the numeric book fields."""

    @pytest.mark.parametrize("price", ["NaN", "Infinity", "-Infinity", float("nan"), float("inf")])
    def test_non_finite_price_rejected(self, price):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(BookUpdate, {"price": price}, "Update")

        assert '"price" must be a number' in exc_info.value.message

    @pytest.mark.parametrize("schema", [BookCreate, BookUpdate])
    @pytest.mark.parametrize("field", ["price", "numberOfPages"])
    def test_booleans_are_not_numbers(self, schema, field):
        body = {"title": "Dune", "author": str(ObjectId()), field: True}

        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(schema, body, "Create")

        assert f'"{field}" must be a number' in exc_info.value.message

    def test_numeric_strings_still_accepted(self):
        fields = validate_payload(BookUpdate, {"price": "19.99", "numberOfPages": "223"}, "Update")
        assert fields == {"price": 19.99, "numberOfPages": 223}

    def test_page_count_beyond_int64_rejected(self):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(BookUpdate, {"numberOfPages": 10**20}, "Update")

        assert '"numberOfPages" is out of range' in exc_info.value.message

    def test_negative_page_count_rejected(self):
        with pytest.raises(InvalidPayload):
            validate_payload(BookUpdate, {"numberOfPages": -1}, "Update")

    @pytest.mark.parametrize("schema", [BookCreate, BookUpdate])
    def test_author_id_checked_on_create_and_update(self, schema):
        with pytest.raises(InvalidPayload) as exc_info:
            validate_payload(schema, {"title": "Dune", "author": "frank"}, "Update")

        assert '"author" must be a valid id' in exc_info.value.message
