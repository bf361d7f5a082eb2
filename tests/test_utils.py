"""
Tests for the shared helpers: id parsing, envelopes, Mongo conversion and
logging.
"""

import json
import logging
from datetime import datetime, timezone

import pytest
from bson import ObjectId

from backoffice.utils import (
    Logger,
    ValidationError,
    configure_logging,
    error_response,
    from_mongo,
    new_object_id,
    page_window,
    paginated_response,
    parse_object_id,
    serialize_mongo_doc,
)


class TestIds:
    def test_round_trip(self):
        oid = new_object_id()
        assert parse_object_id(oid) == oid

    @pytest.mark.parametrize("value", ["", "abc", "z" * 24])
    def test_malformed(self, value):
        with pytest.raises(ValidationError) as exc:
            parse_object_id(value, "user ID")
        assert exc.value.detail == "Invalid user ID"

    def test_page_window(self):
        assert page_window(1, 10) == 0
        assert page_window(3, 25) == 50


class TestMongoConversion:
    def test_from_mongo_stringifies_id(self):
        oid = ObjectId()
        assert from_mongo({"_id": oid, "name": "x"}) == {"_id": str(oid), "name": "x"}
        assert from_mongo(None) is None

    def test_serialize_nested(self):
        when = datetime(2026, 3, 1, tzinfo=timezone.utc)
        doc = serialize_mongo_doc({"_id": ObjectId(), "at": when, "rows": [{"at": when}]})
        assert doc["at"] == when.isoformat()
        assert doc["rows"][0]["at"] == when.isoformat()


class TestEnvelopes:
    def test_paginated(self):
        resp = paginated_response(items=[1, 2], page=1, limit=2, total=5)
        body = json.loads(resp.body)
        assert body["totalPages"] == 3
        assert body["count"] == 2

    def test_error(self):
        resp = error_response("Nope", code=403)
        assert resp.status_code == 403
        assert json.loads(resp.body) == {"success": False, "error": {"code": 403, "message": "Nope"}}


class TestLogger:
    def test_names_are_namespaced(self):
        assert Logger("request").name == "backoffice.request"
        assert Logger("backoffice.users.service").name == "backoffice.users.service"

    def test_configure_level(self):
        configure_logging(debug=True)
        assert logging.getLogger("backoffice").level == logging.DEBUG
        configure_logging(debug=False)
        assert logging.getLogger("backoffice").level == logging.INFO
