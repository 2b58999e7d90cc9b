from datetime import datetime, timezone

import pytest

from weather_pusher.services.normalizer import normalize, parse_number

NOW = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)

NUMERIC_FIELDS = ["clouds", "main", "precipitation", "wind"]
RAW_PAYLOAD_KEYS = {"icon", "humidity", "pressure", "wind_gust", "wind_deg", "rain_3h", "snow_3h"}


def test_empty_document_defaults_everything():
    obs = normalize({}, now=NOW)

    assert obs.location == "Unknown"
    assert obs.observed_at == NOW
    assert obs.weather is None
    for field in NUMERIC_FIELDS:
        assert getattr(obs, field) is None
    assert set(obs.raw_payload) == RAW_PAYLOAD_KEYS
    assert all(v is None for v in obs.raw_payload.values())


@pytest.mark.parametrize("raw", [None, [], "text", 42, {"main": None}, {"main": "hot"}, {"main": [1, 2]}])
def test_malformed_documents_never_raise(raw):
    obs = normalize(raw, now=NOW)

    assert obs.location == "Unknown"
    assert obs.main is None
    assert obs.raw_payload["humidity"] is None


def test_end_to_end_example():
    raw = {
        "main": {"temperature_c": 21.5, "humidity_percent": "N/A"},
        "weather": {"description": "Clear"},
    }

    obs = normalize(raw, now=NOW)

    assert obs.main == 21.5
    assert obs.weather == "Clear"
    assert obs.location == "Unknown"
    assert obs.clouds is None
    assert obs.precipitation is None
    assert obs.wind is None
    assert obs.raw_payload["humidity"] is None
    assert obs.raw_payload["icon"] is None


def test_na_marker_is_null_for_every_numeric_source():
    raw = {
        "clouds": {"cloudiness_percent": "N/A"},
        "main": {"temperature_c": "N/A", "humidity_percent": "N/A", "pressure_hpa": "N/A"},
        "precipitation": {"rain_3h_mm": "N/A", "snow_3h_mm": "N/A"},
        "wind": {"speed_ms": "N/A", "gust_ms": "N/A", "direction_degrees": "N/A"},
    }

    obs = normalize(raw, now=NOW)

    for field in NUMERIC_FIELDS:
        assert getattr(obs, field) is None
    assert {k for k, v in obs.raw_payload.items() if v is not None} == set()


def test_precipitation_prefers_rain_over_snow():
    obs = normalize({"precipitation": {"rain_3h_mm": 1.5, "snow_3h_mm": 4.0}}, now=NOW)

    assert obs.precipitation == 1.5
    assert obs.raw_payload["rain_3h"] == 1.5
    assert obs.raw_payload["snow_3h"] == 4.0


def test_precipitation_falls_back_to_snow():
    obs = normalize({"precipitation": {"rain_3h_mm": "N/A", "snow_3h_mm": "2"}}, now=NOW)

    assert obs.precipitation == 2.0


def test_zero_rain_is_kept_not_skipped():
    obs = normalize({"precipitation": {"rain_3h_mm": 0, "snow_3h_mm": 3}}, now=NOW)

    assert obs.precipitation == 0.0


def test_full_document():
    raw = {
        "datetime_utc": "2026-01-01T12:00:00Z",
        "location": {"name": "Lleida", "lat": 41.6},
        "clouds": {"cloudiness_percent": "40"},
        "main": {"temperature_c": 21.5, "humidity_percent": 55, "pressure_hpa": 1013},
        "weather": {"description": "Light rain", "icon": "10d"},
        "wind": {"speed_ms": 3.2, "gust_ms": 7, "direction_degrees": 270},
        "sys": {"sunrise": 123},
    }

    obs = normalize(raw, now=NOW)

    assert obs.observed_at == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert obs.location == "Lleida"
    assert obs.clouds == 40.0
    assert obs.wind == 3.2
    assert obs.raw_payload == {
        "icon": "10d",
        "humidity": 55.0,
        "pressure": 1013.0,
        "wind_gust": 7.0,
        "wind_deg": 270.0,
        "rain_3h": None,
        "snow_3h": None,
    }
    assert "sys" not in obs.model_dump()


def test_observed_at_is_converted_to_utc():
    obs = normalize({"datetime_utc": "2026-01-01T14:00:00+02:00"}, now=NOW)

    assert obs.observed_at == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert obs.observed_at.utcoffset().total_seconds() == 0


def test_naive_observed_at_is_taken_as_utc():
    obs = normalize({"datetime_utc": "2026-01-01T12:00:00"}, now=NOW)

    assert obs.observed_at == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value",
    [
        "yesterday",
        "",
        None,
        {"iso": "2026-01-01"},
        "9999-12-31T23:30:00-02:00",
        "0001-01-01T00:30:00+02:00",
    ],
)
def test_unparseable_observed_at_falls_back_to_ingestion_time(value):
    obs = normalize({"datetime_utc": value}, now=NOW)

    assert obs.observed_at == NOW


def test_observed_at_serializes_as_iso_utc():
    obs = normalize({"datetime_utc": "2026-01-01T12:00:00Z"}, now=NOW)

    assert obs.model_dump(mode="json")["observed_at"] == "2026-01-01T12:00:00Z"


def test_structured_text_fields_are_not_leaked():
    raw = {"location": {"name": {"en": "Lleida"}}, "weather": {"description": ["Clear"], "icon": {}}}

    obs = normalize(raw, now=NOW)

    assert obs.location == "Unknown"
    assert obs.weather is None
    assert obs.raw_payload["icon"] is None


@pytest.mark.parametrize("name", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_location_name_falls_back_to_unknown(name):
    obs = normalize({"location": {"name": name}, "weather": {"description": name}}, now=NOW)

    assert obs.location == "Unknown"
    assert obs.weather is None


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, None),
        ("N/A", None),
        (" N/A ", None),
        ("", None),
        ("abc", None),
        (True, None),
        (float("nan"), None),
        (float("inf"), None),
        ({"v": 1}, None),
        (0, 0.0),
        (7, 7.0),
        ("3.5", 3.5),
    ],
)
def test_parse_number(value, expected):
    assert parse_number(value) == expected
