"""
Village/mandal reconciliation.

This module parses the bundled village/mandal blob, merges it with the
optional remote override table and exposes the result as a LocationMapping.
A LocationSession ties one mapping to the lifetime of a project form.
"""

import logging
import re
from collections.abc import Mapping
from typing import Callable, Dict, Iterable, Iterator, List, Optional

import pandas as pd

from ..backend import RemoteTableSource
from ..models import LocationRecord
from ..utils.data_utils import village_key, unique_sorted
from ..utils.error_handler import create_error_context, log_error_details


HEADER_PATTERN = re.compile(r'^Village\s*,\s*Mandal$', re.IGNORECASE)
LINE_SPLIT_PATTERN = re.compile(r'\r?\n')

REMOTE_COLUMNS = ('mandal', 'village')

SOURCE_LOCAL = 'local'
SOURCE_MERGED = 'merged'
SOURCE_FALLBACK = 'local-fallback'


class MalformedRemoteData(ValueError):
    """Raised when the remote location payload is not a list of rows."""


def parse_location_blob(text: Optional[str]) -> List[LocationRecord]:
    """
    Parse ``village,mandal`` lines.

    Blank lines and the ``Village, Mandal`` header are skipped. Each line is
    split on its last comma since village names may contain commas; lines
    without a comma or with an empty side are dropped.

    Args:
        text: The blob contents

    Returns:
        Records in file order, duplicates included
    """
    records = []
    skipped = 0

    for line in LINE_SPLIT_PATTERN.split(text or ""):
        line = line.strip()
        if not line or HEADER_PATTERN.match(line):
            continue

        village, sep, mandal = line.rpartition(',')
        record = LocationRecord.from_values(village, mandal) if sep else None
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logging.getLogger(__name__).debug(f"Skipped {skipped} malformed location lines")

    return records


def normalize_remote_rows(rows) -> List[LocationRecord]:
    """
    Convert remote ``{village, mandal}`` rows into records.

    Rows whose village or mandal is empty after trim are skipped.

    Raises:
        MalformedRemoteData: If the payload is not a list of mappings
    """
    if not isinstance(rows, (list, tuple)):
        raise MalformedRemoteData(f"Expected a list of rows, got {type(rows).__name__}")

    records = []
    for row in rows:
        if not isinstance(row, Mapping):
            raise MalformedRemoteData(f"Expected a mapping row, got {type(row).__name__}")
        record = LocationRecord.from_values(row.get('village'), row.get('mandal'))
        if record is not None:
            records.append(record)
    return records


class LocationMapping:
    """
    Village to mandal mapping keyed by lower-cased village name.

    Insertion order is preserved; re-inserting an existing key replaces the
    record but keeps its original position.
    """

    def __init__(self, records: Optional[Dict[str, LocationRecord]] = None):
        self._records: Dict[str, LocationRecord] = dict(records or {})

    @classmethod
    def from_records(cls, records: Iterable[LocationRecord]) -> 'LocationMapping':
        """De-duplicate ``records`` by village; the first occurrence wins."""
        keyed: Dict[str, LocationRecord] = {}
        for record in records:
            keyed.setdefault(record.key, record)
        return cls(keyed)

    @classmethod
    def merged(cls, local: Iterable[LocationRecord],
               remote: Iterable[LocationRecord]) -> 'LocationMapping':
        """Local records first, then remote ones overwriting the same village."""
        keyed = dict(cls.from_records(local)._records)
        for record in remote:
            keyed[record.key] = record
        return cls(keyed)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LocationRecord]:
        return iter(self._records.values())

    def __contains__(self, village: object) -> bool:
        return isinstance(village, str) and village_key(village.strip()) in self._records

    def __repr__(self) -> str:
        return f"LocationMapping({len(self)} villages)"

    @property
    def records(self) -> List[LocationRecord]:
        return list(self._records.values())

    def is_empty(self) -> bool:
        return not self._records

    def get(self, village: str) -> Optional[LocationRecord]:
        """Case-insensitive lookup by village name."""
        return self._records.get(village_key(village.strip()))

    def mandal_for(self, village: str) -> Optional[str]:
        """Mandal of the record whose village matches ``village`` exactly."""
        record = self._records.get(village_key(village))
        if record is not None and record.village == village:
            return record.mandal
        return None

    def mandals(self) -> List[str]:
        """Distinct mandals in locale-aware order."""
        return unique_sorted(record.mandal for record in self._records.values())

    def villages(self, mandal: Optional[str] = None) -> List[str]:
        """
        Distinct villages in locale-aware order.

        Args:
            mandal: Restrict to villages of this mandal (exact match)
        """
        if mandal:
            source = (r.village for r in self._records.values() if r.mandal == mandal)
        else:
            source = (r.village for r in self._records.values())
        return unique_sorted(source)

    def to_dataframe(self) -> pd.DataFrame:
        """Mapping as a DataFrame with ``village`` and ``mandal`` columns."""
        return pd.DataFrame(
            [(r.village, r.mandal) for r in self._records.values()],
            columns=['village', 'mandal']
        )


class LocationReconciler:
    """
    Builds LocationMappings from the local blob and the remote override table.

    Remote failures never reach the caller: they are logged and the local
    mapping is used instead.
    """

    def __init__(self, remote_source: Optional[RemoteTableSource] = None,
                 remote_table: str = "mandal_villages",
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the reconciler.

        Args:
            remote_source: Optional source of the remote override table
            remote_table: Name of the remote table
            logger: Optional logger instance
        """
        self.remote_source = remote_source
        self.remote_table = remote_table
        self.logger = logger or logging.getLogger(__name__)

    @property
    def has_remote(self) -> bool:
        return self.remote_source is not None

    def local_mapping(self, blob: Optional[str]) -> LocationMapping:
        """Parse and de-duplicate the local blob."""
        return LocationMapping.from_records(parse_location_blob(blob))

    async def fetch_remote(self) -> Optional[List[LocationRecord]]:
        """
        Fetch the remote override rows.

        Returns:
            Remote records, or None when no remote is configured or the fetch
            failed or returned a malformed payload
        """
        if self.remote_source is None:
            return None

        try:
            rows = await self.remote_source.select(self.remote_table, REMOTE_COLUMNS)
            return normalize_remote_rows(rows)
        except Exception as e:
            context = create_error_context(
                operation="fetch_remote_locations",
                table=self.remote_table
            )
            log_error_details(self.logger, e, context, severity='medium')
            return None

    async def reconcile(self, blob: Optional[str]) -> LocationMapping:
        """
        Build the mapping for ``blob`` including the remote override.

        Args:
            blob: Local ``village,mandal`` text

        Returns:
            The merged mapping, or the de-duplicated local mapping when the
            remote is absent or unavailable
        """
        local = parse_location_blob(blob)
        remote = await self.fetch_remote()
        if remote is None:
            mapping = LocationMapping.from_records(local)
            source = SOURCE_FALLBACK if self.has_remote else SOURCE_LOCAL
            remote_count = 0
        else:
            mapping = LocationMapping.merged(local, remote)
            source = SOURCE_MERGED
            remote_count = len(remote)

        self.logger.info(f"Location mapping ({source}): {len(local):,} local, "
                         f"{remote_count:,} remote, {len(mapping):,} merged")
        return mapping


MappingListener = Callable[[LocationMapping], None]


class LocationSession:
    """
    The location mapping of one project form, from mount to unmount.

    ``mount`` makes the local mapping available synchronously; ``refresh``
    performs the single remote fetch and swaps in the merged mapping. A fetch
    that resolves after ``unmount`` (or after a re-mount) is discarded.
    """

    def __init__(self, reconciler: LocationReconciler,
                 logger: Optional[logging.Logger] = None):
        self.reconciler = reconciler
        self.logger = logger or reconciler.logger
        self.mapping = LocationMapping()
        self.source: Optional[str] = None
        self._local: List[LocationRecord] = []
        self._mounted = False
        self._generation = 0
        self._listeners: List[MappingListener] = []

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    def subscribe(self, listener: MappingListener) -> Callable[[], None]:
        """Call ``listener`` whenever the mapping is replaced; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mount(self, blob: Optional[str]) -> LocationMapping:
        """Parse the local blob and publish the local-only mapping."""
        self._generation += 1
        self._mounted = True
        self._local = parse_location_blob(blob)
        self._publish(LocationMapping.from_records(self._local), SOURCE_LOCAL)
        return self.mapping

    async def refresh(self) -> Optional[LocationMapping]:
        """
        Merge in the remote override table.

        Returns:
            The mapping now in effect, or None if the session was unmounted
            or re-mounted while the fetch was pending
        """
        if not self._mounted:
            return None
        if not self.reconciler.has_remote:
            return self.mapping

        generation = self._generation
        local = list(self._local)
        remote = await self.reconciler.fetch_remote()

        if not self._mounted or generation != self._generation:
            self.logger.debug("Discarding remote locations for an unmounted form")
            return None

        if remote is None:
            self._publish(LocationMapping.from_records(local), SOURCE_FALLBACK)
        else:
            self._publish(LocationMapping.merged(local, remote), SOURCE_MERGED)
            self.logger.info(f"Location mapping ({SOURCE_MERGED}): {len(local):,} local, "
                             f"{len(remote):,} remote, {len(self.mapping):,} merged")
        return self.mapping

    def unmount(self):
        """Discard the mapping and listeners."""
        self._mounted = False
        self._generation += 1
        self._local = []
        self._listeners.clear()
        self.mapping = LocationMapping()
        self.source = None

    def _publish(self, mapping: LocationMapping, source: str):
        self.mapping = mapping
        self.source = source
        for listener in list(self._listeners):
            listener(mapping)
