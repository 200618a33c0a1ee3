import pytest

from utils.formatting import (
    fmt_decimal,
    fmt_km,
    fmt_m,
    fmt_pct,
    fmt_speed_kmh,
    format_pace_from_minutes,
    format_pace_min_km,
    pace_from_totals,
    set_locale,
)


def _normalize(s):
    # NBSP (\u00A0) and NNBSP (\u202F) to regular space for assertion
    return s.replace("\u00A0", " ").replace("\u202F", " ")


def test_fr_formatting():
    set_locale("fr_FR")
    assert _normalize(fmt_decimal(1234.5)) == "1 234,5"
    assert fmt_decimal(2.0) == "2"
    assert _normalize(fmt_km(12.34)) == "12,3 km"
    assert _normalize(fmt_m(1234.4)) == "1 234 m"
    assert _normalize(fmt_speed_kmh(9.44)) == "9,4 km/h"
    assert _normalize(fmt_pct(-7.25)).endswith("%")
    assert fmt_km(None) == ""


def test_unknown_locale_falls_back_to_fr():
    set_locale("xx_NOPE")
    assert "," in fmt_km(12.3)
    set_locale("fr_FR")


@pytest.mark.parametrize(
    "speed, expected",
    [(12.0, "05:00"), (10.0, "06:00"), (60.0 / 5.5, "05:30"), (60.0 / 4.999, "05:00")],
)
def test_pace_from_speed(speed, expected):
    assert format_pace_min_km(speed) == expected


@pytest.mark.parametrize("speed", [0.0, -3.0, float("nan"), float("inf"), None])
def test_pace_undefined_for_non_positive_speed(speed):
    assert format_pace_min_km(speed) is None


def test_pace_from_minutes_rollover():
    assert format_pace_from_minutes(5.9999) == "06:00"
    assert format_pace_from_minutes(0) is None


def test_pace_from_totals():
    assert pace_from_totals(3600, 10.0) == "06:00"
    assert pace_from_totals(3600, 0.0) is None
