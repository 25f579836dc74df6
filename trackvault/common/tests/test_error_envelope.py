# trackvault/common/tests/test_error_envelope.py
import logging

import pytest
from django.db import DatabaseError
from django.test import RequestFactory
from rest_framework.exceptions import ValidationError

from trackvault.common.api.exceptions import ConflictError, NotFoundError, PersistenceError, api_exception_handler
from trackvault.suppliers.models import Supplier


def _handle(exc):
    req = RequestFactory().get("/api/v1/anything/")
    return api_exception_handler(exc, {"request": req})


@pytest.mark.parametrize(
    "exc, status_code, code",
    [
        (NotFoundError("Product x not found."), 404, "not_found"),
        (ConflictError("Overlap."), 409, "conflict"),
        (ValidationError({"unit": "This field may not be blank."}), 400, "validation_error"),
        (PersistenceError("Failed to save."), 500, "persistence_error"),
    ],
)
def test_taxonomy_maps_to_status_and_code(exc, status_code, code):
    res = _handle(exc)
    assert res.status_code == status_code
    assert res.data["error"]["code"] == code
    assert res.data["error"]["request_id"]


def test_message_and_details_split():
    res = _handle(ConflictError({"detail": "Rate overlaps.", "conflicting_rate_ids": ["a", "b"]}))
    err = res.data["error"]
    assert err["message"] == "Rate overlaps."
    assert err["details"] == {"conflicting_rate_ids": ["a", "b"]}


def test_field_errors_go_to_details():
    err = _handle(ValidationError({"rate": "Must be non-negative."})).data["error"]
    assert err["message"] == "Request failed."
    assert err["details"] == {"rate": ["Must be non-negative."]}


def test_does_not_exist_becomes_404():
    res = _handle(Supplier.DoesNotExist("Supplier matching query does not exist."))
    assert res.status_code == 404
    assert res.data["error"]["code"] == "not_found"


def test_unhandled_error_is_logged_and_hidden(caplog):
    with caplog.at_level(logging.ERROR):
        res = _handle(RuntimeError("secret internals"))

    assert res.status_code == 500
    assert res.data["error"]["code"] == "server_error"
    assert "secret" not in res.data["error"]["message"]
    assert any("Unhandled API error" in r.getMessage() for r in caplog.records)


def test_persistence_error_keeps_cause():
    cause = DatabaseError("connection lost")
    try:
        try:
            raise cause
        except DatabaseError as exc:
            raise PersistenceError("Failed to save product rate.") from exc
    except PersistenceError as err:
        assert err.__cause__ is cause
        assert _handle(err).data["error"]["message"] == "Failed to save product rate."
