"""
Git client infrastructure for subsync.

Every git command subsync runs goes through GitClient. Commands are
executed with an argument list, never a shell, and report failure through
their return code rather than by raising.
"""

import os
import subprocess
from dataclasses import dataclass
from typing import Optional, List, Tuple
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryRecord:
    """A submodule entry from .gitmodules."""
    name: str
    path: str
    url: str = ""


class GitClient:
    """
    Abstraction over git commands.

    Commands are passed as argument lists, never through a shell, since
    locators come from an untrusted text file.

    Example:
        client = GitClient()
        root = client.toplevel(os.getcwd())
        record = client.find_record(root, "alpha")
    """

    def __init__(self, timeout: Optional[int] = None):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (None or 0 waits forever)
        """
        self.timeout = timeout or None

    def _run(
        self,
        args: List[str],
        cwd: str,
        capture_stderr: bool = False
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments after ``git``
            cwd: Working directory
            capture_stderr: Include stderr in output

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = ['git'] + list(args)
        logger.debug(f"Running in '{cwd}': {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

        output = result.stdout
        if capture_stderr and result.stderr:
            output += result.stderr

        if result.returncode != 0 and result.stderr and result.stderr.strip():
            logger.debug(result.stderr.strip())

        return output.strip() if output else None, result.returncode

    def is_git_repo(self, path: str) -> bool:
        """Check if path has a .git entry (directory, or file for submodules)."""
        git_dir = Path(path) / ".git"
        return git_dir.exists()

    def toplevel(self, path: str) -> Optional[str]:
        """
        Find the root of the working tree containing ``path``.

        Returns:
            Absolute path of the root, or None outside a repository
        """
        if not os.path.isdir(path):
            return None
        output, code = self._run(['rev-parse', '--show-toplevel'], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def is_checkout(self, path: str) -> bool:
        """
        Check that ``path`` is the root of its own working tree.

        A plain directory inside the parent repository reports the parent's
        root, so it does not count.
        """
        if not os.path.isdir(path) or not self.is_git_repo(path):
            return False
        root = self.toplevel(path)
        if not root:
            return False
        return Path(root).resolve() == Path(path).resolve()

    def head(self, path: str) -> Optional[str]:
        """Commit hash checked out at ``path``."""
        output, code = self._run(['rev-parse', 'HEAD'], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def recorded_commit(self, root: str, path: str) -> Optional[str]:
        """Commit the parent's index records for the submodule at ``path``."""
        output, code = self._run(['ls-files', '--stage', '--', path], cwd=root)
        if code != 0 or not output:
            return None
        for line in output.splitlines():
            meta, _, entry_path = line.partition('\t')
            fields = meta.split()
            if entry_path == path and len(fields) >= 2 and fields[0] == '160000':
                return fields[1]
        return None

    def submodule_records(self, root: str, gitmodules_file: str = '.gitmodules') -> List[RegistryRecord]:
        """
        Read submodule records from ``gitmodules_file``.

        Returns:
            Records in file order; empty if the file is missing
        """
        if not (Path(root) / gitmodules_file).is_file():
            return []

        output, code = self._run(
            ['config', '--file', gitmodules_file, '--get-regexp', r'^submodule\.'],
            cwd=root
        )
        if code != 0 or not output:
            return []

        paths = {}
        urls = {}
        order = []
        for line in output.splitlines():
            key, _, value = line.partition(' ')
            section, _, variable = key.rpartition('.')
            name = section[len('submodule.'):]
            if name not in order:
                order.append(name)
            if variable == 'path':
                paths[name] = value.strip()
            elif variable == 'url':
                urls[name] = value.strip()

        return [
            RegistryRecord(name=name, path=paths[name], url=urls.get(name, ""))
            for name in order
            if name in paths
        ]

    def find_record(self, root: str, path: str, gitmodules_file: str = '.gitmodules') -> Optional[RegistryRecord]:
        """Find the record whose path equals ``path``."""
        for record in self.submodule_records(root, gitmodules_file):
            if record.path == path:
                return record
        return None

    def submodule_add(self, root: str, locator: str, path: str, force: bool = True) -> Tuple[bool, str]:
        """
        Register a new submodule checkout at ``path``.

        ``force`` adds the path even when .gitignore would ignore it.

        Returns:
            Tuple of (success, output)
        """
        args = ['submodule', 'add']
        if force:
            args.append('--force')
        args += ['--', locator, path]
        output, code = self._run(args, cwd=root, capture_stderr=True)
        return code == 0, output or ""

    def submodule_update_remote(self, root: str, path: str) -> Tuple[bool, str]:
        """
        Fast-forward a submodule to the tip of its tracked remote branch.

        Returns:
            Tuple of (success, output)
        """
        output, code = self._run(
            ['submodule', 'update', '--remote', '--', path],
            cwd=root,
            capture_stderr=True
        )
        return code == 0, output or ""

    def add(self, root: str, *paths: str) -> bool:
        """
        Stage paths in the index.

        Returns:
            True if successful
        """
        _, code = self._run(['add', '--'] + list(paths), cwd=root)
        return code == 0

    def staged_paths(self, root: str) -> List[str]:
        """Paths with staged changes."""
        output, code = self._run(['diff', '--cached', '--name-only'], cwd=root)
        if code != 0 or not output:
            return []
        return [line for line in output.splitlines() if line]
