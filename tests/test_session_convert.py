"""Tests for the CSV <-> JSON conversion script."""

import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from run_session_convert import main

CSV_TEXT = (
    "datetime,teaName,origin,steep-1,steep-2,custom-rating\r\n"
    "2024-01-01T10:00,Dragon Well,China,Grassy,,9/10\r\n"
    "not-a-date,Broken,,,,\r\n"
)


def test_csv_to_json(tmp_path, capsys):
    source = tmp_path / "in.csv"
    source.write_text(CSV_TEXT, encoding="utf-8")
    target = tmp_path / "out.json"

    assert main([str(source), "-o", str(target)]) == 0

    data = json.loads(target.read_text(encoding="utf-8"))
    assert len(data) == 1
    assert data[0]["teaName"] == "Dragon Well"
    assert data[0]["brewingVessel"] == ""
    assert data[0]["steeps"] == ["Grassy"]
    assert data[0]["customFields"] == [{"name": "custom-rating", "value": "9/10"}]

    captured = capsys.readouterr()
    assert "WARNING" in captured.err
    assert "Converted 1 sessions" in captured.out


def test_strict_rejects_partial(tmp_path):
    source = tmp_path / "in.csv"
    source.write_text(CSV_TEXT, encoding="utf-8")
    target = tmp_path / "out.json"

    assert main([str(source), "-o", str(target), "--strict"]) == 1
    assert not target.exists()


def test_json_to_csv(tmp_path):
    source = tmp_path / "in.json"
    source.write_text(json.dumps([
        {"datetime": "2024-01-01T10:00:00", "teaName": "Shou", "steeps": ["Earthy", "Sweet"]},
    ]), encoding="utf-8")
    target = tmp_path / "out.csv"

    assert main([str(source), "-o", str(target)]) == 0

    lines = target.read_bytes().decode("utf-8").split("\r\n")
    assert lines[0].endswith(",steep-1,steep-2")
    assert lines[1].startswith("2024-01-01T10:00,Shou,")
    assert lines[1].endswith(",Earthy,Sweet")


def test_invalid_input_fails(tmp_path, capsys):
    source = tmp_path / "in.json"
    source.write_text("{}", encoding="utf-8")

    assert main([str(source), "-o", str(tmp_path / "out.csv")]) == 1
    assert "ERROR" in capsys.readouterr().err


def test_missing_input_fails(tmp_path):
    assert main([str(tmp_path / "nope.csv"), "-o", str(tmp_path / "out.json")]) == 1
