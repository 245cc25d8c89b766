"""
File import tracking.

Each accepted file gets a FileImportState that moves
``pending -> processing -> success | error`` exactly once, through
``transition``. Files are read and parsed one at a time, in the order they were
enqueued; a failing file is marked ``error`` and never stops the batch.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Union

from tqdm import tqdm

from .config import ImportConfig
from .errors import (
    EntryNotRemovableError,
    IllegalTransitionError,
    NoDataError,
    UnsupportedFileError,
)
from .models import CanonicalRecord, FileImportState, FileStatus
from .parsers import decode_bytes, parse_records

logger = logging.getLogger(__name__)

NO_VALID_DATA = "no valid data found"

_ALLOWED_MOVES = {
    FileStatus.PENDING: (FileStatus.PROCESSING,),
    FileStatus.PROCESSING: (FileStatus.SUCCESS, FileStatus.ERROR),
}


@dataclass(frozen=True)
class SourceFile:
    """A named byte source: either in-memory bytes or a path read on demand."""
    name: str
    data: Optional[bytes] = None
    path: Optional[Path] = None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SourceFile":
        path = Path(path)
        return cls(name=path.name, path=path)

    @classmethod
    def from_bytes(cls, name: str, data: Union[bytes, str]) -> "SourceFile":
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls(name=name, data=data)

    @property
    def size(self) -> int:
        if self.data is not None:
            return len(self.data)
        if self.path is not None and self.path.exists():
            return self.path.stat().st_size
        return 0

    async def read(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError(f"{self.name}: no data or path to read from")
        return await asyncio.to_thread(self.path.read_bytes)


def transition(state: FileImportState, target: FileStatus, *,
               error: Optional[str] = None,
               record_count: Optional[int] = None) -> FileImportState:
    """Return ``state`` moved to ``target``; raise if the lifecycle forbids it."""
    if target not in _ALLOWED_MOVES.get(state.status, ()):
        raise IllegalTransitionError(state.name, state.status, target)
    if target == FileStatus.SUCCESS:
        if not record_count or record_count < 1:
            raise ValueError("success requires a positive record count")
        return replace(state, status=target, record_count=record_count, error=None)
    if target == FileStatus.ERROR:
        return replace(state, status=target, error=error or NO_VALID_DATA, record_count=None)
    return replace(state, status=target)


class WorkingCollection:
    """Append-only union of records from every file that imported successfully."""

    def __init__(self):
        self._records: List[CanonicalRecord] = []
        self.version = 0

    def extend(self, records: Iterable[CanonicalRecord]) -> int:
        before = len(self._records)
        self._records.extend(records)
        added = len(self._records) - before
        if added:
            self.version += 1
        return added

    def clear(self) -> None:
        self._records = []
        self.version += 1

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CanonicalRecord]:
        return iter(self._records)

    @property
    def records(self) -> List[CanonicalRecord]:
        return list(self._records)


@dataclass
class ImportSummary:
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    records_added: int = 0
    error: Optional[str] = None


FileLike = Union[SourceFile, str, Path]


class FileImportTracker:
    """
    Queue of files to import, with observable per-file status.

    Args:
        collection: Where successful records are appended
        config: Allow-list and timezone settings
        on_change: Called with the new state after every transition
    """

    def __init__(self, collection: Optional[WorkingCollection] = None,
                 config: Optional[ImportConfig] = None,
                 on_change: Optional[Callable[[FileImportState], None]] = None):
        self.collection = collection if collection is not None else WorkingCollection()
        self.config = config or ImportConfig()
        self.on_change = on_change
        self._entries: Dict[int, FileImportState] = {}
        self._sources: Dict[int, SourceFile] = {}
        self._ids = itertools.count(1)
        self._running = False

    # -- queue -----------------------------------------------------------

    def _is_allowed(self, name: str) -> bool:
        return name.lower().endswith(self.config.allowed_suffixes)

    def enqueue(self, files: Iterable[FileLike]) -> List[FileImportState]:
        """
        Queue files as ``pending``.

        Files whose name is not on the allow-list never enter the queue. If any
        were rejected, one UnsupportedFileError naming all of them is raised
        after the allowed files have been queued (``error.accepted``).
        """
        accepted: List[FileImportState] = []
        rejected: List[str] = []
        for f in files:
            source = f if isinstance(f, SourceFile) else SourceFile.from_path(f)
            if not self._is_allowed(source.name):
                rejected.append(source.name)
                continue
            file_id = next(self._ids)
            state = FileImportState(file_id=file_id, name=source.name, size=source.size)
            self._entries[file_id] = state
            self._sources[file_id] = source
            accepted.append(state)
            logger.debug("queued %s (%d bytes)", source.name, state.size)

        if rejected:
            logger.warning("rejected %d file(s): %s", len(rejected), ", ".join(rejected))
            err = UnsupportedFileError(rejected, self.config.allowed_suffixes)
            err.accepted = accepted
            raise err
        return accepted

    def remove(self, file_id: int) -> FileImportState:
        """Drop a file that has not started processing."""
        state = self._entries[file_id]
        if state.status != FileStatus.PENDING:
            raise EntryNotRemovableError(
                f"{state.name} is {state.status.value}; only pending files can be removed"
            )
        del self._entries[file_id]
        del self._sources[file_id]
        return state

    def clear(self) -> None:
        """Forget every entry. Records already imported stay in the collection."""
        if self._running:
            raise RuntimeError("cannot clear the queue while an import is running")
        self._entries.clear()
        self._sources.clear()

    # -- state -----------------------------------------------------------

    def get(self, file_id: int) -> FileImportState:
        return self._entries[file_id]

    @property
    def entries(self) -> List[FileImportState]:
        return list(self._entries.values())

    def _count(self, status: FileStatus) -> int:
        return sum(1 for s in self._entries.values() if s.status == status)

    @property
    def pending_count(self) -> int:
        return self._count(FileStatus.PENDING)

    @property
    def success_count(self) -> int:
        return self._count(FileStatus.SUCCESS)

    @property
    def error_count(self) -> int:
        return self._count(FileStatus.ERROR)

    @property
    def is_processing(self) -> bool:
        return self._running

    def _move(self, file_id: int, target: FileStatus, **kwargs) -> FileImportState:
        state = transition(self._entries[file_id], target, **kwargs)
        self._entries[file_id] = state
        logger.debug("%s -> %s", state.name, state.status.value)
        if self.on_change is not None:
            self.on_change(state)
        return state

    # -- processing ------------------------------------------------------

    async def _load(self, source: SourceFile) -> List[CanonicalRecord]:
        data = await source.read()
        text = decode_bytes(data)
        return parse_records(text, tz=self.config.timezone)

    async def process_pending(self, progress: bool = False) -> ImportSummary:
        """
        Parse every pending file, one after another, in enqueue order.

        Files already in a terminal state are skipped, so each accepted file is
        parsed at most once. Read and parse failures become ``error`` states.
        """
        if self._running:
            raise RuntimeError("an import is already running")
        self._running = True
        summary = ImportSummary()
        try:
            pending = [fid for fid, s in self._entries.items() if s.status == FileStatus.PENDING]
            iterator = tqdm(pending, desc="Importing", unit="file") if progress else pending
            for file_id in iterator:
                # removed or otherwise moved on since the batch started
                if self._entries.get(file_id) is None or \
                        self._entries[file_id].status != FileStatus.PENDING:
                    continue

                state = self._move(file_id, FileStatus.PROCESSING)
                summary.processed += 1
                try:
                    records = await self._load(self._sources[file_id])
                except Exception as e:
                    logger.warning("%s: could not be read: %s", state.name, e, exc_info=True)
                    self._move(file_id, FileStatus.ERROR, error=f"could not read file: {e}")
                    summary.failed += 1
                    continue

                if not records:
                    logger.warning("%s: %s", state.name, NO_VALID_DATA)
                    self._move(file_id, FileStatus.ERROR, error=NO_VALID_DATA)
                    summary.failed += 1
                    continue

                added = self.collection.extend(records)
                self._move(file_id, FileStatus.SUCCESS, record_count=len(records))
                summary.succeeded += 1
                summary.records_added += added
        finally:
            self._running = False

        if summary.processed and len(self.collection) == 0:
            summary.error = str(NoDataError())
            logger.error(summary.error)
        else:
            logger.info(
                "imported %d file(s), %d failed, %d record(s) added (%d total)",
                summary.succeeded, summary.failed, summary.records_added, len(self.collection),
            )
        return summary
