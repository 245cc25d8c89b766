"""
One import session: the file queue, the working collection built from it, and
the statistics shown for the current filter.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Iterable, Optional

from .aggregate import aggregate
from .config import ImportConfig
from .errors import NoDataError, UnsupportedFileError
from .filters import filter_records, has_active_criteria
from .heatmap import build_heatmap
from .models import FilterCriteria, HeatmapGrid, StatisticsBundle
from .tracker import FileImportTracker, FileLike, ImportSummary, WorkingCollection

logger = logging.getLogger(__name__)


class ListeningSession:
    """
    In-memory listening history for a single user session.

    The bundle over the full collection is computed once per collection change
    and cached; filtered bundles are recomputed whenever asked for.
    """

    def __init__(self, config: Optional[ImportConfig] = None, progress: bool = False):
        self.config = config or ImportConfig()
        self.progress = progress
        self.collection = WorkingCollection()
        self.tracker = FileImportTracker(self.collection, self.config)
        self.criteria = FilterCriteria()
        self._cached_bundle: Optional[StatisticsBundle] = None
        self._cached_version = -1

    @classmethod
    def from_env(cls, progress: bool = False) -> "ListeningSession":
        return cls(ImportConfig.from_env(), progress=progress)

    # -- importing -------------------------------------------------------

    def add_files(self, files: Iterable[FileLike]):
        return self.tracker.enqueue(files)

    async def import_pending(self, raise_on_empty: bool = False) -> ImportSummary:
        summary = await self.tracker.process_pending(progress=self.progress)
        if raise_on_empty and summary.error:
            raise NoDataError(summary.error)
        return summary

    def import_files(self, files: Iterable[FileLike], raise_on_empty: bool = True) -> ImportSummary:
        """
        Queue ``files`` and run the import to completion (blocking wrapper).

        Rejected names do not stop the batch: the accepted files are imported
        first, then the UnsupportedFileError is re-raised with ``summary`` set.
        """
        rejected = None
        try:
            self.add_files(files)
        except UnsupportedFileError as e:
            rejected = e
        summary = asyncio.run(
            self.import_pending(raise_on_empty=raise_on_empty and rejected is None)
        )
        if rejected is not None:
            rejected.summary = summary
            raise rejected
        return summary

    # -- filters ---------------------------------------------------------

    def set_filters(self, criteria: Optional[FilterCriteria] = None, **fields) -> FilterCriteria:
        """Replace the active criteria, either with an instance or keyword fields."""
        self.criteria = criteria if criteria is not None else FilterCriteria(**fields)
        return self.criteria

    def clear_filters(self) -> None:
        self.criteria = FilterCriteria()

    @property
    def has_active_filters(self) -> bool:
        return has_active_criteria(self.criteria)

    # -- statistics ------------------------------------------------------

    @property
    def full_statistics(self) -> Optional[StatisticsBundle]:
        if self._cached_version != self.collection.version:
            self._cached_bundle = aggregate(self.collection, top_n=self.config.top_n)
            self._cached_version = self.collection.version
        return self._cached_bundle

    @property
    def filtered_statistics(self) -> Optional[StatisticsBundle]:
        return aggregate(filter_records(self.collection, self.criteria), top_n=self.config.top_n)

    @property
    def statistics(self) -> Optional[StatisticsBundle]:
        """
        The bundle to display: filtered when a criterion is active, the cached
        full bundle otherwise. None means no record matches (or none imported).
        """
        if self.has_active_filters:
            return self.filtered_statistics
        return self.full_statistics

    @property
    def has_data(self) -> bool:
        return len(self.collection) > 0

    def heatmap(self, today: Optional[date] = None) -> Optional[HeatmapGrid]:
        bundle = self.statistics
        if bundle is None:
            return None
        return build_heatmap(bundle.listening_by_day, today=today,
                             window_days=self.config.heatmap_days)

    # -- lifecycle -------------------------------------------------------

    def reset(self) -> None:
        """Start over: drop files, records, cached statistics and filters."""
        self.tracker.clear()
        self.collection.clear()
        self.clear_filters()
        self._cached_bundle = None
        logger.info("session reset")
