"""
Domain layer for subsync.

Contains pure domain objects with no I/O or side effects:
- SourceEntry: A locator from the submodule list and its derived name
- EntryResult / SyncSummary: What happened to each entry and to the run
- SyncOutcome: The four possible final outcomes of a run
"""

from .entry import SourceEntry, derive_name, invalid_name_reason, iter_entries, read_entries
from .operation import (
    EntryResult,
    EntryState,
    OperationStatus,
    SyncOutcome,
    SyncSummary,
    outcome_messages,
    summarize,
)

__all__ = [
    'SourceEntry',
    'derive_name',
    'invalid_name_reason',
    'iter_entries',
    'read_entries',
    'EntryResult',
    'EntryState',
    'OperationStatus',
    'SyncOutcome',
    'SyncSummary',
    'outcome_messages',
    'summarize',
]
