"""
Submodule sync service for subsync.

Reconciles the submodule list against the parent repository's .gitignore
and .gitmodules. Used by the `subsync sync` and `subsync status` commands.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from ..config import load_config
from ..domain.entry import SourceEntry, invalid_name_reason, read_entries
from ..domain.operation import EntryResult, EntryState, OperationStatus, SyncSummary
from ..exit_codes import ConfigError, NotInRepositoryError
from ..gitignore import IgnoreFile, base_policy
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)


@dataclass
class SyncOptions:
    """Options for a sync run. File names are relative to the repository root."""
    list_file: str = "submodules.txt"
    gitignore_file: str = ".gitignore"
    readme_file: str = "README.md"
    gitmodules_file: str = ".gitmodules"
    dry_run: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides) -> 'SyncOptions':
        options = cls(
            list_file=config.get('list_file', cls.list_file),
            gitignore_file=config.get('gitignore_file', cls.gitignore_file),
            readme_file=config.get('readme_file', cls.readme_file),
            gitmodules_file=config.get('gitmodules_file', cls.gitmodules_file),
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(options, key, value)
        return options


def _last_line(output: str) -> str:
    lines = [line.strip() for line in (output or "").splitlines() if line.strip()]
    return lines[-1] if lines else "unknown error"


class SyncService:
    """
    Service that keeps submodules in line with the submodule list.

    Each entry gets its .gitignore rule fixed first, then its registry
    state reconciled. A failing entry is recorded and the run continues.

    Example:
        service = SyncService()
        root = service.locate_root()

        for progress in service.sync(root, SyncOptions()):
            print(progress)

        result = service.last_result
        print(result.outcome)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize SyncService.

        Args:
            config: Configuration dict (loads default if None)
            git_client: GitClient instance (creates new if None)

        Raises:
            ConfigError: if git.timeout_seconds is not a non-negative integer
        """
        self.config = config if config is not None else load_config()
        timeout = self.config.get('git', {}).get('timeout_seconds')
        if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 0):
            raise ConfigError(f"git.timeout_seconds must be a non-negative integer, got {timeout!r}")
        self.git = git_client or GitClient(timeout=timeout)
        self.last_result: Optional[SyncSummary] = None

    def locate_root(self, cwd: Optional[str] = None) -> str:
        """
        Find the parent repository root.

        Raises:
            NotInRepositoryError: if ``cwd`` is not inside a working tree
        """
        root = self.git.toplevel(cwd or os.getcwd())
        if not root:
            raise NotInRepositoryError()
        return root

    def classify(self, root: str, entry: SourceEntry, options: SyncOptions) -> EntryState:
        """Registry state of ``entry``: unregistered, healthy, or broken."""
        record = self.git.find_record(root, entry.name, options.gitmodules_file)
        if record is None:
            return EntryState.UNREGISTERED
        if self.git.is_checkout(os.path.join(root, entry.name)):
            return EntryState.REGISTERED_HEALTHY
        return EntryState.REGISTERED_BROKEN

    def sync(self, root: str, options: SyncOptions) -> Generator[str, None, SyncSummary]:
        """
        Synchronize every entry of the list file into ``root``.

        Yields:
            Progress messages

        Returns:
            SyncSummary with results

        Raises:
            ListFileError: if the list file cannot be read
        """
        summary = SyncSummary(root=root, dry_run=options.dry_run)
        self.last_result = summary

        entries = read_entries(Path(root) / options.list_file)

        yield f"Starting submodule synchronization from {options.list_file}..."

        ignore = IgnoreFile.load(Path(root) / options.gitignore_file)

        yield f"Ensuring base {options.gitignore_file} rules..."
        rules = base_policy(options.gitignore_file, options.readme_file, options.gitmodules_file)
        if ignore.ensure_base_policy(rules):
            yield from self._persist_ignore(root, ignore, options, summary)
            yield f"Created basic {options.gitignore_file}."

        seen: Dict[str, str] = {}
        for entry in entries:
            yield f"Processing submodule: {entry.name} (URL: {entry.locator})"
            detail = yield from self._sync_entry(root, entry, ignore, seen, options, summary)
            summary.add_detail(detail)

        return summary

    def _persist_ignore(
        self,
        root: str,
        ignore: IgnoreFile,
        options: SyncOptions,
        summary: SyncSummary
    ) -> Generator[str, None, bool]:
        """Write and stage .gitignore. Returns True if it was staged."""
        if options.dry_run:
            summary.mark_staged()
            return True

        ignore.save()
        if not self.git.add(root, options.gitignore_file):
            summary.add_error(f"failed to stage {options.gitignore_file}")
            yield f"  WARNING: Failed to stage {options.gitignore_file}."
            return False
        summary.mark_staged()
        return True

    def _sync_entry(
        self,
        root: str,
        entry: SourceEntry,
        ignore: IgnoreFile,
        seen: Dict[str, str],
        options: SyncOptions,
        summary: SyncSummary
    ) -> Generator[str, None, EntryResult]:
        reason = invalid_name_reason(entry.name)
        if reason:
            yield f"  ERROR: Cannot use '{entry.locator}' (line {entry.line_number}): {reason}. (Skipping this submodule)"
            return EntryResult(
                name=entry.name,
                locator=entry.locator,
                status=OperationStatus.FAILED,
                action="invalid",
                error=reason,
            )

        if entry.name in seen:
            if seen[entry.name] == entry.locator:
                yield f"  '{entry.name}' is listed more than once. (Skipping duplicate)"
                return EntryResult(
                    name=entry.name,
                    locator=entry.locator,
                    status=OperationStatus.SKIPPED,
                    action="duplicate",
                    message="already processed",
                )
            error = f"name '{entry.name}' is already used by {seen[entry.name]}"
            yield f"  ERROR: {error}. (Skipping this submodule)"
            return EntryResult(
                name=entry.name,
                locator=entry.locator,
                status=OperationStatus.FAILED,
                action="duplicate_name",
                error=error,
            )
        seen[entry.name] = entry.locator

        ignore_changed = ignore.ensure_entry(entry.name)
        if ignore_changed:
            yield f"  Ensured '{entry.unignore_rule}' is the only rule for '{entry.name}/' in {options.gitignore_file}."
            yield from self._persist_ignore(root, ignore, options, summary)

        state = self.classify(root, entry, options)
        if state == EntryState.REGISTERED_HEALTHY:
            yield f"  '{entry.name}' is configured in {options.gitmodules_file} and checked out. Updating it."
            detail = yield from self._update(root, entry, options, summary)
        elif state == EntryState.REGISTERED_BROKEN:
            yield (f"  '{entry.name}' is configured in {options.gitmodules_file} but missing "
                   f"or not a proper Git repo. Re-adding.")
            detail = yield from self._register(root, entry, state, options)
        else:
            yield f"  '{entry.name}' is not configured in {options.gitmodules_file}. Adding as a new submodule."
            detail = yield from self._register(root, entry, state, options)

        detail.ignore_changed = ignore_changed
        return detail

    def _update(
        self,
        root: str,
        entry: SourceEntry,
        options: SyncOptions,
        summary: SyncSummary
    ) -> Generator[str, None, EntryResult]:
        """Update a healthy submodule and stage it when the parent records another commit."""
        state = EntryState.REGISTERED_HEALTHY
        if options.dry_run:
            yield f"  Would update '{entry.name}' from its remote."
            return EntryResult(
                name=entry.name,
                locator=entry.locator,
                status=OperationStatus.DRY_RUN,
                action="would_update",
                state=state,
            )

        ok, output = self.git.submodule_update_remote(root, entry.name)
        if not ok:
            error = _last_line(output)
            logger.debug(f"update of {entry.name} failed: {output}")
            yield (f"  WARNING: Failed to update submodule '{entry.name}'. "
                   f"Check access and remote. (Skipping this submodule)")
            return EntryResult(
                name=entry.name,
                locator=entry.locator,
                status=OperationStatus.FAILED,
                action="update_failed",
                state=state,
                error=error,
            )

        checked_out = self.git.head(os.path.join(root, entry.name))
        recorded = self.git.recorded_commit(root, entry.name)
        if checked_out is not None and checked_out == recorded:
            yield f"  Submodule '{entry.name}' is already up to date."
            return EntryResult(
                name=entry.name,
                locator=entry.locator,
                status=OperationStatus.SUCCESS,
                action="up_to_date",
                state=state,
            )

        message = f"{(recorded or '')[:12]} -> {(checked_out or '')[:12]}"
        if not self.git.add(root, entry.name):
            summary.add_error(f"failed to stage {entry.name}")
            yield f"  WARNING: Updated '{entry.name}' but failed to stage it."
            return EntryResult(
                name=entry.name,
                locator=entry.locator,
                status=OperationStatus.SUCCESS,
                action="updated",
                state=state,
                message=message,
            )

        yield f"  Submodule '{entry.name}' updated successfully."
        return EntryResult(
            name=entry.name,
            locator=entry.locator,
            status=OperationStatus.SUCCESS,
            action="updated",
            state=state,
            staged=True,
            message=message,
        )

    def _register(
        self,
        root: str,
        entry: SourceEntry,
        state: EntryState,
        options: SyncOptions
    ) -> Generator[str, None, EntryResult]:
        """Add (or re-add) ``entry`` as a submodule, clearing plain directories first."""
        verb = "readd" if state == EntryState.REGISTERED_BROKEN else "add"
        path = os.path.join(root, entry.name)
        existing_checkout = self.git.is_checkout(path)

        if options.dry_run:
            if os.path.isdir(path) and not existing_checkout:
                yield f"  Would remove non-repository directory '{entry.name}'."
            yield f"  Would {verb} '{entry.name}' from {entry.locator}."
            return EntryResult(
                name=entry.name,
                locator=entry.locator,
                status=OperationStatus.DRY_RUN,
                action=f"would_{verb}",
                state=state,
            )

        if os.path.isdir(path) and not existing_checkout:
            yield f"  Local directory '{entry.name}' exists but is not a Git repo. Removing it."
            try:
                shutil.rmtree(path)
            except OSError as e:
                yield f"  ERROR: Could not remove '{entry.name}': {e}. (Skipping this submodule)"
                return EntryResult(
                    name=entry.name,
                    locator=entry.locator,
                    status=OperationStatus.FAILED,
                    action=f"{verb}_failed",
                    state=state,
                    error=str(e),
                )

        ok, output = self.git.submodule_add(root, entry.locator, entry.name, force=True)
        if not ok:
            logger.debug(f"submodule add of {entry.name} failed: {output}")
            if not existing_checkout and os.path.isdir(path):
                shutil.rmtree(path, ignore_errors=True)
            yield f"  ERROR: Failed to {verb} submodule '{entry.name}' from '{entry.locator}'."
            yield "  Please check the URL and ensure you have access (e.g., SSH key setup)."
            return EntryResult(
                name=entry.name,
                locator=entry.locator,
                status=OperationStatus.FAILED,
                action=f"{verb}_failed",
                state=state,
                error=_last_line(output),
            )

        # submodule add already staged both paths; this re-stages after any hooks
        if not self.git.add(root, entry.name, options.gitmodules_file):
            yield f"  WARNING: Failed to stage '{entry.name}' and {options.gitmodules_file}."
        yield f"  Submodule '{entry.name}' {verb}ed successfully."
        return EntryResult(
            name=entry.name,
            locator=entry.locator,
            status=OperationStatus.SUCCESS,
            action=f"{verb}ed",
            state=state,
            staged=True,
        )

    def status(self, root: str, options: SyncOptions) -> List[Dict[str, Any]]:
        """
        Describe every entry without changing anything.

        Raises:
            ListFileError: if the list file cannot be read
        """
        entries = read_entries(Path(root) / options.list_file)
        ignore = IgnoreFile.load(Path(root) / options.gitignore_file)

        rows = []
        for entry in entries:
            row = entry.to_dict()
            reason = invalid_name_reason(entry.name)
            if reason:
                row['state'] = 'invalid'
                row['error'] = reason
                rows.append(row)
                continue

            record = self.git.find_record(root, entry.name, options.gitmodules_file)
            row['state'] = self.classify(root, entry, options).value
            row['registered_url'] = record.url if record else None
            row['ignore_rule'] = 'ok' if ignore.is_canonical(entry.name) else (
                'stale' if ignore.rules_for(entry.name) else 'missing')
            rows.append(row)
        return rows
