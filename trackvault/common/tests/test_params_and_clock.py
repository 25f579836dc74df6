# trackvault/common/tests/test_params_and_clock.py
from datetime import date
from uuid import UUID

import pytest
from rest_framework.exceptions import ValidationError

from trackvault.common.api.params import bool_param, date_or_none, uuid_or_none
from trackvault.common.clock import FixedClock, SystemClock


def test_date_or_none():
    assert date_or_none(None, "d") is None
    assert date_or_none("", "d") is None
    assert date_or_none("2024-02-29", "d") == date(2024, 2, 29)
    with pytest.raises(ValidationError):
        date_or_none("2024-02-30", "d")
    with pytest.raises(ValidationError):
        date_or_none("yesterday", "d")


def test_uuid_or_none():
    assert uuid_or_none(None, "id") is None
    assert uuid_or_none("00000000-0000-0000-0000-000000000001", "id") == UUID(int=1)
    with pytest.raises(ValidationError):
        uuid_or_none("nope", "id")


@pytest.mark.parametrize("raw, expected", [("1", True), ("true", True), ("Yes", True), ("0", False), (None, False)])
def test_bool_param(raw, expected):
    assert bool_param(raw) is expected


def test_clocks():
    assert FixedClock(date(2024, 3, 15)).today() == date(2024, 3, 15)
    assert isinstance(SystemClock().today(), date)
