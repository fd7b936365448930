from datetime import date, datetime, time

import pytest

from src.training_attendance.training_attendance.common.datetime_utils import (
    month_window,
    parse_client_datetime,
    parse_iso_date,
    parse_slot_time,
)
from src.training_attendance.training_attendance.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "raw, expected",
    [("14:30", time(14, 30)), ("9:45", time(9, 45)), ("14", time(14, 0)), (" 14:30 ", time(14, 30))],
)
def test_parse_slot_time_accepts(raw, expected):
    assert parse_slot_time(raw) == expected


@pytest.mark.parametrize("raw", ["14:30:45", "", None, "2pm", "25:00"])
def test_parse_slot_time_rejects(raw):
    with pytest.raises(ValueError):
        parse_slot_time(raw)


def test_parse_client_datetime_formats():
    assert parse_client_datetime("2024-05-06T10:15:00") == datetime(2024, 5, 6, 10, 15)
    assert parse_client_datetime("6/5/2024, 2:05:09 pm") == datetime(2024, 5, 6, 14, 5, 9)

    with pytest.raises(ValidationError):
        parse_client_datetime("yesterday")


def test_parse_iso_date():
    assert parse_iso_date("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValidationError):
        parse_iso_date("29/02/2024")


def test_month_window():
    assert month_window(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_window(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))
    with pytest.raises(ValidationError):
        month_window(2024, 13)
