"""Tests for the listenstats command line."""

import json

import pytest

from listenstats.cli import main

from conftest import to_csv


@pytest.fixture
def export_file(tmp_path, monkeypatch, csv_text):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "history.csv"
    path.write_text(csv_text, encoding="utf-8")
    return path


def test_stats_text(export_file, capsys):
    main(["stats", str(export_file)])
    out = capsys.readouterr().out
    assert "Imported 2 records" in out
    assert "Track 1 - Artist A (2 plays, 5 min)" in out


def test_stats_json(export_file, capsys):
    main(["stats", str(export_file), "--json"])
    out = capsys.readouterr().out
    payload = json.loads(out[out.index("{"):])
    assert payload["total_streams"] == 2
    assert len(payload["listening_by_hour"]) == 24


def test_stats_with_filter_that_matches_nothing(export_file, capsys):
    main(["stats", str(export_file), "--min-minutes", "4"])
    assert "No streams match" in capsys.readouterr().out


def test_export_csv(export_file, tmp_path):
    out_dir = tmp_path / "out"
    main(["export", str(export_file), "--out", str(out_dir)])
    assert (out_dir / "top_tracks.csv").exists()
    assert (out_dir / "by_hour.csv").read_text().count("\n") == 25


def test_heatmap(export_file, capsys):
    main(["heatmap", str(export_file), "--today", "2024-01-06"])
    out = capsys.readouterr().out
    grid = json.loads(out[out.index("{"):])
    assert grid["end"] == "2024-01-06"
    days = [c for week in grid["weeks"] for c in week if c["date"] == "2024-01-01"]
    assert days[0]["minutes"] == 5
    assert days[0]["level"] == "peak"


def test_rejected_extension(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "history.txt"
    path.write_text("x")
    with pytest.raises(SystemExit) as exc:
        main(["stats", str(path)])
    assert "history.txt" in str(exc.value)


def test_no_valid_data(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "bad.csv"
    path.write_text(to_csv([("2024-01-01T10:00:00", "", "T", 1000)]))
    with pytest.raises(SystemExit) as exc:
        main(["stats", str(path)])
    assert "no valid data" in str(exc.value)


def test_rejected_file_is_reported_and_rest_imported(export_file, tmp_path, capsys):
    other = tmp_path / "notes.txt"
    other.write_text("hello", encoding="utf-8")
    main(["stats", str(export_file), str(other)])
    out = capsys.readouterr().out
    assert "rejected: notes.txt" in out
    assert "Imported 2 records" in out


def test_only_rejected_files_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    other = tmp_path / "notes.txt"
    other.write_text("hello", encoding="utf-8")
    with pytest.raises(SystemExit):
        main(["stats", str(other)])
