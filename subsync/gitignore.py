"""
.gitignore reconciliation for the parent repository.

The parent ignores everything by default and un-ignores its own metadata
files plus one ``!<name>/`` rule per submodule. ``IgnoreFile`` holds the
lines in memory; nothing touches disk until ``save()``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

DENY_ALL = '*'
ENCODING = 'utf-8'


def base_policy(gitignore_file: str = '.gitignore',
                readme_file: str = 'README.md',
                gitmodules_file: str = '.gitmodules') -> List[str]:
    """Default deny-all rules, exempting the parent's own files."""
    return [
        DENY_ALL,
        f'!{gitignore_file}',
        f'!{readme_file}',
        f'!{gitmodules_file}',
    ]


@dataclass
class IgnoreFile:
    """
    Ordered .gitignore lines plus the lines originally loaded.

    ``changed`` compares the two, so an edit that restores the original
    content is not a change.
    """
    lines: List[str] = field(default_factory=list)
    original: Optional[List[str]] = None
    path: Optional[Path] = None
    newline: str = '\n'

    def __post_init__(self):
        if self.original is None:
            self.original = list(self.lines)

    @classmethod
    def parse(cls, text: str, path: Optional[Path] = None) -> 'IgnoreFile':
        """Split ``text`` into rules, remembering whether it used CRLF endings."""
        lines = [line.rstrip() for line in text.splitlines()]
        newline = '\r\n' if '\r\n' in text else '\n'
        return cls(lines=lines, path=path, newline=newline)

    @classmethod
    def load(cls, path) -> 'IgnoreFile':
        """Read ``path``; a missing file loads as empty with ``exists`` False."""
        path = Path(path)
        if not path.exists():
            return cls(lines=[], original=None, path=path)
        # undecodable bytes round-trip through surrogateescape
        text = path.read_bytes().decode(ENCODING, errors='surrogateescape')
        return cls.parse(text, path=path)

    @property
    def exists(self) -> bool:
        return self.path is not None and self.path.exists()

    @property
    def changed(self) -> bool:
        return self.lines != self.original

    def serialize(self) -> str:
        if not self.lines:
            return ''
        return self.newline.join(self.lines) + self.newline

    def save(self, path=None) -> Path:
        """Write the lines out and make them the new baseline."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("IgnoreFile has no path to save to")
        target.write_bytes(self.serialize().encode(ENCODING, errors='surrogateescape'))
        self.path = target
        self.original = list(self.lines)
        logger.debug(f"Wrote {len(self.lines)} rules to {target}")
        return target

    def ensure_base_policy(self, rules: List[str]) -> bool:
        """Seed an empty file with ``rules``. Returns True if lines were added."""
        if self.lines:
            return False
        self.lines = list(rules)
        return True

    def rules_for(self, name: str) -> List[str]:
        """All lines that ignore or un-ignore ``name/`` exactly."""
        variants = (f'{name}/', f'!{name}/')
        return [line for line in self.lines if line in variants]

    def is_canonical(self, name: str) -> bool:
        """True if ``name`` has exactly one ``!name/`` and no ``name/`` line."""
        return self.rules_for(name) == [f'!{name}/']

    def ensure_entry(self, name: str) -> bool:
        """
        Make ``!name/`` the only rule for ``name``.

        Stale ``name/`` lines and duplicate ``!name/`` lines are dropped and
        a single ``!name/`` appended at the end. A file already in that state
        is left alone. Returns True if the lines changed.
        """
        if self.is_canonical(name):
            return False

        before = list(self.lines)
        variants = (f'{name}/', f'!{name}/')
        self.lines = [line for line in self.lines if line not in variants]
        self.lines.append(f'!{name}/')
        return self.lines != before
