"""
Record filtering.

Filters never touch the working collection; they derive a new list that the
aggregator can be run on.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from .models import CanonicalRecord, FilterCriteria


def has_active_criteria(criteria: Optional[FilterCriteria]) -> bool:
    return criteria is not None and not criteria.is_empty


def matches(record: CanonicalRecord, criteria: FilterCriteria) -> bool:
    """True when ``record`` satisfies every non-empty criterion."""
    if criteria.artist_substring and \
            criteria.artist_substring.lower() not in record.artist_name.lower():
        return False
    if criteria.track_substring and \
            criteria.track_substring.lower() not in record.track_name.lower():
        return False

    if criteria.date_from or criteria.date_to:
        # A record without a timestamp cannot satisfy a date bound
        if record.timestamp is None:
            return False
        day = record.timestamp.date()
        if criteria.date_from and day < criteria.date_from:
            return False
        if criteria.date_to and day > criteria.date_to:
            return False

    if criteria.min_played_minutes > 0 and record.minutes < criteria.min_played_minutes:
        return False
    return True


def filter_records(records: Iterable[CanonicalRecord],
                   criteria: Optional[FilterCriteria] = None) -> List[CanonicalRecord]:
    """Return the records passing ``criteria`` in their original order."""
    if not has_active_criteria(criteria):
        return list(records)
    return [r for r in records if matches(r, criteria)]
