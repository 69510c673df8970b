"""
Tests for document serialization and response envelopes.
"""

from datetime import datetime, timedelta, timezone

from bson import ObjectId

from library_api.envelope import build_envelope, format_datetime, serialize_document, serialize_page


def test_format_naive_datetime_as_utc():
    assert format_datetime(datetime(1980, 1, 1)) == "1980-01-01T00:00:00.000Z"


def test_format_keeps_milliseconds_and_converts_offsets():
    value = datetime(2024, 5, 6, 12, 30, 15, 123456, tzinfo=timezone(timedelta(hours=3)))
    assert format_datetime(value) == "2024-05-06T09:30:15.123Z"


def test_serialize_document_exposes_id_only():
    oid, author_id = ObjectId(), ObjectId()
    document = {
        "_id": oid,
        "title": "Harry Potter",
        "author": author_id,
        "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }

    result = serialize_document(document)

    assert result == {
        "id": str(oid),
        "title": "Harry Potter",
        "author": str(author_id),
        "createdAt": "2024-01-01T00:00:00.000Z",
    }


def test_serialize_page():
    oid = ObjectId()
    page = {"results": [{"_id": oid, "name": "Ada"}], "page": 1, "limit": 10, "totalPages": 1, "totalResults": 1}

    assert serialize_page(page) == {
        "results": [{"id": str(oid), "name": "Ada"}],
        "page": 1,
        "limit": 10,
        "totalPages": 1,
        "totalResults": 1,
    }


def test_build_envelope():
    assert build_envelope("Author deleted successfully") == {"message": "Author deleted successfully"}
    assert build_envelope("Author found successfully", "author", {"name": "Ada"}) == {
        "message": "Author found successfully",
        "author": {"name": "Ada"},
    }
