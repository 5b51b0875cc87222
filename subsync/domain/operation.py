"""
Operation result domain objects for subsync.

Provides standardized result types for a sync run: the state each entry
was found in, what happened to it, and the run-level summary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple


class OperationStatus(Enum):
    """Status of an individual operation."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"
    DRY_RUN = "dry_run"


class EntryState(Enum):
    """Registry state of an entry before it is reconciled."""
    UNREGISTERED = "unregistered"
    REGISTERED_HEALTHY = "registered_healthy"
    REGISTERED_BROKEN = "registered_broken"


@dataclass
class EntryResult:
    """
    Details of reconciling one source entry.

    ``action`` is a short verb such as "added", "readded", "updated",
    "would_add" or "add_failed".
    """
    name: str
    locator: str
    status: OperationStatus
    action: str
    state: Optional[EntryState] = None
    ignore_changed: bool = False
    staged: bool = False
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'name': self.name,
            'locator': self.locator,
            'status': self.status.value,
            'action': self.action,
            'ignore_changed': self.ignore_changed,
            'staged': self.staged,
        }
        if self.state:
            result['state'] = self.state.value
        if self.message:
            result['message'] = self.message
        if self.error:
            result['error'] = self.error
        return result


class SyncOutcome(Enum):
    """Final outcome of a run, from the two run-level flags."""
    CHANGES_CLEAN = "changes_staged"
    CHANGES_WITH_ERRORS = "changes_staged_with_errors"
    NO_CHANGES_WITH_ERRORS = "no_changes_with_errors"
    NO_CHANGES_CLEAN = "up_to_date"


OUTCOME_MESSAGES = {
    SyncOutcome.CHANGES_CLEAN: (
        "Submodule synchronization complete. Changes have been staged.",
    ),
    SyncOutcome.CHANGES_WITH_ERRORS: (
        "Submodule synchronization complete. Changes have been staged.",
        "WARNING: Some errors occurred during processing. Review logs above.",
    ),
    SyncOutcome.NO_CHANGES_WITH_ERRORS: (
        "Submodule synchronization completed with errors. "
        "No new changes were staged for commit.",
        "Please review the errors above and address them (e.g., SSH key issues).",
    ),
    SyncOutcome.NO_CHANGES_CLEAN: (
        "No new submodules to add or updates needed.",
        "All existing submodules seem to be up-to-date and correctly configured.",
    ),
}


def summarize(changes_staged: bool, errors_occurred: bool) -> SyncOutcome:
    """Map the run-level flags to exactly one outcome."""
    if changes_staged:
        return SyncOutcome.CHANGES_WITH_ERRORS if errors_occurred else SyncOutcome.CHANGES_CLEAN
    return SyncOutcome.NO_CHANGES_WITH_ERRORS if errors_occurred else SyncOutcome.NO_CHANGES_CLEAN


def outcome_messages(outcome: SyncOutcome) -> Tuple[str, ...]:
    return OUTCOME_MESSAGES[outcome]


@dataclass
class SyncSummary:
    """
    Summary of a sync run across all entries.

    ``changes_staged`` and ``errors_occurred`` are the two run-level flags;
    everything else is bookkeeping for reports.
    """
    root: str = ""
    dry_run: bool = False
    total: int = 0
    successful: int = 0
    skipped: int = 0
    failed: int = 0
    changes_staged: bool = False
    errors_occurred: bool = False
    details: List[EntryResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no failures occurred."""
        return not self.errors_occurred

    @property
    def outcome(self) -> SyncOutcome:
        return summarize(self.changes_staged, self.errors_occurred)

    def mark_staged(self) -> None:
        self.changes_staged = True

    def add_error(self, message: str) -> None:
        """Record an error that is not tied to a single entry."""
        self.errors.append(message)
        self.errors_occurred = True

    def add_detail(self, detail: EntryResult) -> None:
        """Add an entry result and update counts."""
        self.details.append(detail)
        self.total += 1

        if detail.staged:
            self.changes_staged = True

        if detail.status in (OperationStatus.SUCCESS, OperationStatus.DRY_RUN):
            self.successful += 1
        elif detail.status == OperationStatus.SKIPPED:
            self.skipped += 1
        elif detail.status == OperationStatus.FAILED:
            self.failed += 1
            self.errors_occurred = True
            if detail.error:
                self.errors.append(f"{detail.name}: {detail.error}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'root': self.root,
            'outcome': self.outcome.value,
            'total': self.total,
            'successful': self.successful,
            'skipped': self.skipped,
            'failed': self.failed,
            'changes_staged': self.changes_staged,
            'errors_occurred': self.errors_occurred,
            'dry_run': self.dry_run,
            'errors': self.errors,
        }
