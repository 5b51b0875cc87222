"""
Service layer for subsync.

Contains business logic that orchestrates domain objects and infrastructure:
- SyncService: Reconcile the submodule list with .gitignore and .gitmodules

Services are the primary API for commands to use.
"""

from .sync_service import SyncOptions, SyncService

__all__ = [
    'SyncOptions',
    'SyncService',
]
