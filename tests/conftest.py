import json

import pytest

from listenstats.models import CanonicalRecord
from listenstats.parsers import coerce_timestamp


ROWS = [
    ("2024-01-01T10:00:00", "Artist A", "Track 1", 200000),
    ("2024-01-01T11:00:00", "Artist A", "Track 1", 100000),
]


def make_record(ts, artist, track, ms):
    return CanonicalRecord(
        timestamp=coerce_timestamp(ts) if ts else None,
        artist_name=artist,
        track_name=track,
        ms_played=ms,
    )


def to_csv(rows, header=("endTime", "artistName", "trackName", "msPlayed")):
    lines = [",".join(header)]
    for ts, artist, track, ms in rows:
        lines.append(f'"{ts}","{artist}","{track}",{ms}')
    return "\n".join(lines) + "\n"


def to_json(rows):
    return json.dumps([
        {"endTime": ts, "artistName": artist, "trackName": track, "msPlayed": ms}
        for ts, artist, track, ms in rows
    ])


@pytest.fixture
def rows():
    return list(ROWS)


@pytest.fixture
def csv_text():
    return to_csv(ROWS)


@pytest.fixture
def json_text():
    return to_json(ROWS)


@pytest.fixture
def records():
    return [make_record(*row) for row in ROWS]
