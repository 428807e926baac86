"""
PatraKosh Client - File Collection Cache

Holds the local projection of the user's file collection: the items that
matched the last completed listing plus the collection-wide statistics.

Author: PatraKosh Project
"""

import threading
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from .file_record import FileRecord, CollectionStats


@dataclass(frozen=True)
class CollectionView:
    """
    Immutable snapshot of the collection at the last successful sync.

    Attributes:
        items: Records in server order (never resorted by the client)
        stats: Collection-wide totals, independent of the query filter
        query: Trimmed search string the items were fetched for ("" = no filter)
    """
    items: Tuple[FileRecord, ...] = ()
    stats: CollectionStats = field(default_factory=CollectionStats)
    query: str = ""

    def find(self, file_id) -> Optional[FileRecord]:
        """
        Return the visible record with the given id, or None.

        Ids are compared as text, so 42 and "42" name the same record.
        """
        wanted = str(file_id)
        for record in self.items:
            if str(record.id) == wanted:
                return record
        return None


class FileCollectionCache:
    """
    Single-owner holder for the current CollectionView.

    Items and stats only ever change together through replace(); readers
    always get a whole snapshot, never a list from one sync and stats from
    another.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._view = CollectionView()

    @property
    def view(self) -> CollectionView:
        with self._lock:
            return self._view

    @property
    def items(self) -> Tuple[FileRecord, ...]:
        return self.view.items

    @property
    def stats(self) -> CollectionStats:
        return self.view.stats

    def replace(self, items: Iterable[FileRecord], stats: CollectionStats,
                query: str = "") -> CollectionView:
        """
        Atomically swap items and stats.

        Args:
            items: Records from a completed listing
            stats: Statistics fetched alongside the listing
            query: Query the listing was made with

        Returns:
            The new snapshot
        """
        new_view = CollectionView(items=tuple(items), stats=stats, query=query)
        with self._lock:
            self._view = new_view
        return new_view
