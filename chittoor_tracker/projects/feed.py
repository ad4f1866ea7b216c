"""
Realtime change feed reduction.

Change notifications for the projects table (insert, update, delete) are
folded into an ordered, id-keyed collection of ProjectRecords. Each event is
applied as one step so the list view always reflects the latest record.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..models import ApprovalStatus, ProjectRecord
from ..utils.data_utils import safe_string_conversion


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    """One change notification: the new row for inserts/updates, the old row for deletes."""

    event_type: ChangeType
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)

    @property
    def record_id(self) -> str:
        source = self.old if self.event_type == ChangeType.DELETE else self.new
        return safe_string_conversion(source.get('id'))

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Optional['ChangeEvent']:
        """
        Build an event from a transport payload.

        Args:
            payload: Mapping with ``eventType`` (or ``type``), ``new`` and ``old``

        Returns:
            ChangeEvent, or None for an unknown event type
        """
        raw_type = payload.get('eventType', payload.get('type'))
        try:
            event_type = ChangeType(str(raw_type).upper())
        except ValueError:
            return None
        return cls(
            event_type=event_type,
            new=dict(payload.get('new') or {}),
            old=dict(payload.get('old') or {})
        )


STATUS_KEYS = ['all'] + [status.value for status in ApprovalStatus]


def count_statuses(records: Iterable[ProjectRecord]) -> Dict[str, int]:
    """Counts per approval status plus ``all``."""
    counts = {key: 0 for key in STATUS_KEYS}
    for record in records:
        counts['all'] += 1
        counts[record.approval_status.value] += 1
    return counts


class ProjectFeed:
    """
    Project list kept in sync with the change feed, newest first.

    With a status filter, inserts outside the filter are ignored and updates
    that move a record out of the filter remove it.
    """

    def __init__(self, records: Iterable[ProjectRecord] = (),
                 status_filter: Optional[ApprovalStatus] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the feed.

        Args:
            records: Initial records, already ordered newest first
            status_filter: Only keep records with this approval status
            logger: Optional logger instance
        """
        self.status_filter = status_filter
        self.logger = logger or logging.getLogger(__name__)
        self._records: 'OrderedDict[str, ProjectRecord]' = OrderedDict()
        self.load(records)

    def load(self, records: Iterable[ProjectRecord]):
        """Replace the contents with a freshly fetched list."""
        self._records.clear()
        for record in records:
            if self._accepts(record):
                self._records[record.id] = record

    def _accepts(self, record: ProjectRecord) -> bool:
        return self.status_filter is None or record.approval_status == self.status_filter

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def get(self, record_id: str) -> Optional[ProjectRecord]:
        return self._records.get(record_id)

    @property
    def records(self) -> List[ProjectRecord]:
        return list(self._records.values())

    def apply(self, event: ChangeEvent) -> bool:
        """
        Apply one change event.

        Returns:
            True if the collection changed
        """
        record_id = event.record_id
        if not record_id:
            self.logger.debug(f"Ignoring {event.event_type.value} event without id")
            return False

        if event.event_type == ChangeType.INSERT:
            return self.insert(ProjectRecord.from_row(event.new))
        if event.event_type == ChangeType.UPDATE:
            return self.update(record_id, event.new)
        return self.delete(record_id)

    def apply_payload(self, payload: Dict[str, Any]) -> bool:
        """Apply a raw transport payload; unknown event types are ignored."""
        event = ChangeEvent.from_payload(payload)
        if event is None:
            self.logger.debug(f"Ignoring change payload of unknown type: {payload.get('eventType')}")
            return False
        return self.apply(event)

    def insert(self, record: ProjectRecord) -> bool:
        """Put ``record`` first, replacing any record with the same id."""
        if not self._accepts(record):
            return False
        self._records.pop(record.id, None)
        self._records[record.id] = record
        self._records.move_to_end(record.id, last=False)
        return True

    def update(self, record_id: str, changes: Dict[str, Any]) -> bool:
        """Merge ``changes`` into an existing record; unknown ids are ignored."""
        current = self._records.get(record_id)
        if current is None:
            return False

        updated = current.merged(changes)
        if not self._accepts(updated):
            del self._records[record_id]
        else:
            self._records[record_id] = updated
        return True

    def delete(self, record_id: str) -> bool:
        return self._records.pop(record_id, None) is not None

    def status_counts(self) -> Dict[str, int]:
        return count_statuses(self._records.values())


class ProjectDetailState:
    """The single project shown on the details page, kept current by UPDATE events."""

    def __init__(self, record_id: str, record: Optional[ProjectRecord] = None):
        self.record_id = record_id
        self.record = record

    def apply(self, event: ChangeEvent) -> bool:
        if event.event_type != ChangeType.UPDATE or event.record_id != self.record_id:
            return False
        if self.record is None:
            self.record = ProjectRecord.from_row(event.new)
        else:
            self.record = self.record.merged(event.new)
        return True
