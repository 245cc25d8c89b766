"""
Streaming History Parsers

Turns exported listening history (CSV or JSON, basic or extended export
flavours) into CanonicalRecord sequences. Field names differ between export
variants, so each logical field is resolved through a synonym set.

Malformed rows are dropped silently; a structurally broken JSON document
yields an empty list rather than an exception.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .models import CanonicalRecord

logger = logging.getLogger(__name__)

# Exact names (lowercase) in order of preference, then a substring fallback.
FIELD_SYNONYMS: Dict[str, Dict[str, Any]] = {
    "timestamp": {
        "names": ("endtime", "end_time", "ts"),
        "contains": None,
    },
    "artist": {
        "names": ("artistname", "master_metadata_album_artist_name"),
        "contains": "artist",
    },
    "track": {
        "names": ("trackname", "master_metadata_track_name"),
        "contains": "track",
    },
    "ms_played": {
        "names": ("msplayed", "ms_played"),
        "contains": None,
    },
}

FORMAT_JSON = "json"
FORMAT_CSV = "csv"


def resolve_fields(keys: Iterable[str]) -> Dict[str, List[str]]:
    """
    Map each logical field to the candidate keys present in ``keys``.

    Candidates are ordered: exact synonyms first (in synonym order), then any
    key containing the field's substring. Matching is case-insensitive.
    """
    keys = [k for k in keys if isinstance(k, str)]
    lowered = {}
    for k in keys:
        lowered.setdefault(k.strip().lower(), k)

    resolved: Dict[str, List[str]] = {}
    for field_name, spec in FIELD_SYNONYMS.items():
        candidates = [lowered[name] for name in spec["names"] if name in lowered]
        needle = spec["contains"]
        if needle:
            candidates.extend(
                k for k in keys if needle in k.strip().lower() and k not in candidates
            )
        resolved[field_name] = candidates
    return resolved


# pandas resolves these against the clock
_RELATIVE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def coerce_timestamp(value: Any, tz: Optional[str] = None) -> Optional[datetime]:
    """
    Parse an export timestamp into a naive local datetime.

    Timezone-aware values (``2024-01-01T10:00:00Z``) are converted to ``tz``,
    or the system zone when ``tz`` is None, before the zone is dropped.
    Unparsable values return None.
    """
    if isinstance(value, datetime):
        ts = pd.Timestamp(value)
    elif isinstance(value, str) and value.strip():
        if value.strip().lower() in _RELATIVE_WORDS:
            return None
        ts = pd.to_datetime(value.strip(), errors="coerce")
    else:
        return None

    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        if tz:
            return ts.tz_convert(tz).tz_localize(None).to_pydatetime()
        return ts.to_pydatetime().astimezone().replace(tzinfo=None)
    return ts.to_pydatetime()


def _coerce_ms(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        ms = float(str(value).strip())
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(ms):
        return 0
    return int(ms)


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first_present(row: Mapping[str, Any], candidates: Sequence[str]) -> Any:
    for key in candidates:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def _to_record(row: Mapping[str, Any], fields: Dict[str, List[str]],
               tz: Optional[str]) -> Optional[CanonicalRecord]:
    artist = _coerce_text(_first_present(row, fields["artist"]))
    track = _coerce_text(_first_present(row, fields["track"]))
    ms_played = _coerce_ms(_first_present(row, fields["ms_played"]))

    # Keep only real plays with both names present
    if not artist or not track or ms_played <= 0:
        return None

    return CanonicalRecord(
        timestamp=coerce_timestamp(_first_present(row, fields["timestamp"]), tz),
        artist_name=artist,
        track_name=track,
        ms_played=ms_played,
    )


def _split_csv_line(line: str) -> Optional[List[str]]:
    try:
        values = next(csv.reader([line], skipinitialspace=True))
    except (csv.Error, StopIteration):
        return None
    return [v.strip() for v in values]


def parse_csv(text: str, tz: Optional[str] = None) -> List[CanonicalRecord]:
    """Parse delimited text whose first line is a header row."""
    lines = [line for line in text.lstrip("\ufeff").splitlines() if line.strip()]
    if not lines:
        return []

    header = _split_csv_line(lines[0])
    if not header:
        return []
    header = [h.strip().strip('"') for h in header]
    fields = resolve_fields(header)

    records: List[CanonicalRecord] = []
    for line in lines[1:]:
        values = _split_csv_line(line)
        if values is None:
            continue
        row = {name: values[idx] for idx, name in enumerate(header) if idx < len(values)}
        record = _to_record(row, fields, tz)
        if record is not None:
            records.append(record)

    logger.debug("csv: %d of %d rows kept", len(records), len(lines) - 1)
    return records


def parse_json(text: str, tz: Optional[str] = None) -> List[CanonicalRecord]:
    """Parse a JSON array of row objects. Invalid JSON or a non-array yields []."""
    try:
        payload = json.loads(text.lstrip("\ufeff"))
    except (json.JSONDecodeError, ValueError):
        logger.debug("json: document is not valid JSON")
        return []

    if not isinstance(payload, list):
        return []

    records: List[CanonicalRecord] = []
    field_cache: Dict[tuple, Dict[str, List[str]]] = {}
    for row in payload:
        if not isinstance(row, dict):
            continue
        key = tuple(row.keys())
        fields = field_cache.get(key)
        if fields is None:
            fields = field_cache[key] = resolve_fields(key)
        record = _to_record(row, fields, tz)
        if record is not None:
            records.append(record)

    logger.debug("json: %d of %d rows kept", len(records), len(payload))
    return records


def decode_bytes(data: bytes) -> str:
    """Decode export bytes. Raises UnicodeDecodeError for unreadable content."""
    return data.decode("utf-8-sig")


def parse_records(text: str, hinted_format: Optional[str] = None,
                  tz: Optional[str] = None) -> List[CanonicalRecord]:
    """
    Parse export text into canonical records.

    Without a hint, JSON is tried first and CSV is used when JSON yields
    nothing, so a file's extension never decides the format on its own.
    """
    if hinted_format == FORMAT_JSON:
        return parse_json(text, tz)
    if hinted_format == FORMAT_CSV:
        return parse_csv(text, tz)
    if hinted_format is not None:
        raise ValueError(f"unsupported format hint: {hinted_format}")

    records = parse_json(text, tz)
    if records:
        return records
    return parse_csv(text, tz)
