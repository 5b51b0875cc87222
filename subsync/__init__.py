"""
subsync - Keep git submodules in line with a list of repositories.

The parent repository ignores everything except its own metadata and one
``!<name>/`` rule per submodule. subsync reads ``submodules.txt`` and, for
every locator in it, makes that rule canonical and then adds, re-adds or
updates the submodule. Changes are staged for the user to commit.

Quick Start:
    from subsync import SyncService, SyncOptions

    service = SyncService()
    root = service.locate_root()
    for message in service.sync(root, SyncOptions()):
        print(message)
    print(service.last_result.outcome)

Domain Objects:
    SourceEntry - A locator and its derived directory name
    EntryResult - What happened to one entry
    SyncSummary - Run-level flags and counts
"""

__version__ = "0.1.0"

from .domain import (
    SourceEntry,
    EntryResult,
    EntryState,
    OperationStatus,
    SyncOutcome,
    SyncSummary,
    derive_name,
    iter_entries,
    read_entries,
    summarize,
)
from .gitignore import IgnoreFile, base_policy
from .infra import GitClient, RegistryRecord
from .services import SyncOptions, SyncService
from .config import load_config

__all__ = [
    "__version__",
    "SourceEntry",
    "EntryResult",
    "EntryState",
    "OperationStatus",
    "SyncOutcome",
    "SyncSummary",
    "derive_name",
    "iter_entries",
    "read_entries",
    "summarize",
    "IgnoreFile",
    "base_policy",
    "GitClient",
    "RegistryRecord",
    "SyncOptions",
    "SyncService",
    "load_config",
]
