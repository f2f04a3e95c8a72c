"""Tests for JSON export and import."""

import json

import pytest

from steepbook.document import JSON_FILENAME, decode_json, encode_json, export_json
from steepbook.messages import MESSAGES
from steepbook.models import OPTIONAL_FIELDS, STATIC_FIELDS, CustomField, Session


class FakeSink:
    def __init__(self):
        self.calls = []

    def __call__(self, content, filename, kind):
        self.calls.append({"content": content, "filename": filename, "kind": kind})


@pytest.fixture
def sessions():
    return [
        Session(
            datetime="2024-01-01T10:00:00Z",
            tea_name="7542",
            brewing_vessel="Gaiwan",
            tea_producer="Dayi",
            origin="Menghai Yunnan",
            purchase_location="Local Tea Shop",
            dry_leaf="Dark brown; slightly sweet aroma",
            wet_leaf="Leather and tobacco",
            additional_notes="Very refreshing",
            steeps=["Wash", "", "Floral", ""],
            custom_fields=[
                CustomField("Water Temperature", "80°C"),
                CustomField("Empty Field", ""),
                CustomField("Rating", "9/10"),
            ],
        ),
        Session(datetime="2024-01-02T14:30:00Z", tea_name="Dragon Well"),
    ]


class TestEncode:

    def test_empty_list(self):
        assert encode_json([]) == "[]"

    def test_filters_empty_entries(self, sessions):
        data = json.loads(encode_json(sessions))

        assert data[0]["steeps"] == ["Wash", "Floral"]
        assert data[0]["customFields"] == [
            {"name": "Water Temperature", "value": "80°C"},
            {"name": "Rating", "value": "9/10"},
        ]
        assert data[1]["steeps"] == []
        assert data[1]["customFields"] == []

    def test_key_order(self, sessions):
        data = json.loads(encode_json(sessions))
        assert list(data[0]) == [*STATIC_FIELDS, "steeps", "customFields"]

    def test_two_space_indent_and_utf8(self, sessions):
        content = encode_json(sessions)

        assert content.startswith('[\n  {\n    "datetime": ')
        assert "80°C" in content

    def test_source_sessions_not_mutated(self, sessions):
        encode_json(sessions)
        assert sessions[0].steeps == ["Wash", "", "Floral", ""]


class TestExport:

    def test_delivers_file(self, sessions):
        sink = FakeSink()

        assert export_json(sessions, sink) is None

        assert len(sink.calls) == 1
        call = sink.calls[0]
        assert call["filename"] == JSON_FILENAME == "steepbook_sessions.json"
        assert call["kind"] == "json"
        assert len(json.loads(call["content"])) == 2

    def test_encode_error_delivers_nothing(self):
        sink = FakeSink()
        broken = Session(datetime="2024-01-01T10:00", tea_name="X", custom_fields=None)

        assert export_json([broken], sink) == MESSAGES["JSON_EXPORT_ERROR"]
        assert sink.calls == []


class TestDecodeFailures:

    @pytest.mark.parametrize("text", [
        "",
        "not json",
        "[{]",
        '{"sessions": []}',
        '"2024-01-01T10:00"',
        "null",
    ])
    def test_whole_file_failures(self, text):
        result = decode_json(text)

        assert result.failed
        assert result.sessions is None
        assert result.error == MESSAGES["JSON_IMPORT_ERROR"]

    def test_non_text_input(self):
        assert decode_json(b"[]").failed

    def test_deeply_nested_array(self):
        result = decode_json("[" * 100000 + "]" * 100000)

        assert result.failed
        assert result.error == MESSAGES["JSON_IMPORT_ERROR"]

    def test_every_element_invalid(self):
        text = json.dumps([
            {"datetime": "not-a-date", "teaName": "A"},
            {"teaName": "B"},
        ])

        result = decode_json(text)

        assert result.failed
        assert result.sessions is None


class TestDecode:

    def test_empty_array(self):
        result = decode_json("[]")

        assert result.ok
        assert result.sessions == []
        assert result.error is None

    def test_datetime_normalized_to_local_form(self):
        text = json.dumps([{"datetime": "2024-01-01T10:00:00", "teaName": "Tea"}])

        session = decode_json(text).sessions[0]

        assert session.datetime == "2024-01-01T10:00"

    def test_optional_fields_backfilled(self):
        text = json.dumps([{"datetime": "2024-01-01T10:00", "teaName": "Tea", "origin": "China"}])

        session = decode_json(text).sessions[0]

        assert session.origin == "China"
        for name in OPTIONAL_FIELDS:
            if name != "origin":
                assert session.get_field(name) == ""
        assert session.steeps == []
        assert session.custom_fields == []

    def test_non_string_optional_values(self):
        text = json.dumps([{"datetime": "2024-01-01T10:00", "teaName": "Tea", "origin": None, "dryLeaf": 5}])

        session = decode_json(text).sessions[0]

        assert session.origin == ""
        assert session.dry_leaf == "5"

    def test_blank_steeps_and_custom_fields_dropped(self):
        text = json.dumps([{
            "datetime": "2024-01-01T10:00",
            "teaName": "Tea",
            "steeps": ["Wash", "", "   ", 3, None, "Floral"],
            "customFields": [
                {"name": "custom-rating", "value": "9/10"},
                {"name": "custom-empty", "value": "  "},
                {"name": "", "value": "orphan"},
                {"name": "custom-number", "value": 7},
                "not-an-object",
            ],
        }])

        session = decode_json(text).sessions[0]

        assert session.steeps == ["Wash", "Floral"]
        assert session.custom_fields == [CustomField("custom-rating", "9/10")]

    def test_partial_success(self):
        text = json.dumps([
            {"datetime": "2024-01-01T10:00", "teaName": "Valid"},
            {"datetime": "not-a-date", "teaName": "Bad date"},
            {"datetime": "2024-01-03T10:00"},
            "not-an-object",
        ])

        result = decode_json(text)

        assert result.partial
        assert result.error == MESSAGES["JSON_IMPORT_ERROR_PARTIAL"]
        assert [s.tea_name for s in result.sessions] == ["Valid"]

    def test_empty_tea_name_allowed(self):
        result = decode_json(json.dumps([{"datetime": "2024-01-01T10:00", "teaName": ""}]))

        assert result.ok
        assert result.sessions[0].tea_name == ""

    def test_scenario_steep_gap_round_trip(self):
        session = Session(datetime="2024-01-01T10:00", tea_name="Tea", steeps=["Wash", "", "Floral"])

        result = decode_json(encode_json([session]))

        assert result.sessions[0].steeps == ["Wash", "Floral"]


class TestRoundTrip:

    def test_decode_of_encode_preserves_sessions(self):
        sessions = [
            Session(
                datetime="2024-01-01T10:00",
                tea_name="Dragon Well",
                origin="Hangzhou",
                steeps=["Grassy", "", "Sweet"],
                custom_fields=[CustomField("Water Temperature", "80°C"), CustomField("Empty", "")],
            ),
            Session(datetime="2024-01-02T14:30", tea_name="Shou"),
        ]

        result = decode_json(encode_json(sessions))

        assert result.ok
        assert result.sessions == [s.filtered() for s in sessions]

    def test_encode_of_decode_is_stable(self):
        text = json.dumps(
            [{"datetime": "2024-01-01T10:00", "teaName": "Tea", **{n: "" for n in OPTIONAL_FIELDS},
              "steeps": ["One"], "customFields": [{"name": "Rating", "value": "9"}]}],
            indent=2,
        )
        assert encode_json(decode_json(text).sessions) == text
