"""
Source entry domain objects for subsync.

A source entry is one line of the submodule list: a locator (URL of a
remote repository) and the directory name derived from it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Generator, Iterable, Optional

from ..exit_codes import ListFileError

# Characters with special meaning to .gitignore pattern matching
IGNORE_METACHARACTERS = frozenset('*?[]\\')


def derive_name(locator: str) -> str:
    """
    Derive the local directory name for a locator.

    Takes the final path segment and strips a trailing ``.git``:

        git@github.com:org/alpha.git  -> alpha
        https://example.com/org/beta/ -> beta
        git@host:gamma.git            -> gamma
    """
    trimmed = locator.strip().rstrip('/')
    segment = trimmed.rsplit('/', 1)[-1]
    if '/' not in trimmed and ':' in segment:
        # scp-like syntax with no path separator: host:repo.git
        segment = segment.rsplit(':', 1)[-1]
    if segment.endswith('.git'):
        segment = segment[:-len('.git')]
    return segment


def invalid_name_reason(name: str) -> Optional[str]:
    """Return why ``name`` cannot be used as a submodule path, or None."""
    if name in ('', '.', '..'):
        return "empty directory name"
    if name.startswith(('!', '#')):
        return f"name starts with {name[0]!r}"
    bad = sorted(set(name) & IGNORE_METACHARACTERS)
    if bad:
        return f"name contains ignore-pattern characters {''.join(bad)!r}"
    return None


@dataclass(frozen=True)
class SourceEntry:
    """One repository to keep in sync."""
    locator: str
    name: str
    line_number: int = 0

    @classmethod
    def from_locator(cls, locator: str, line_number: int = 0) -> 'SourceEntry':
        locator = locator.strip()
        return cls(locator=locator, name=derive_name(locator), line_number=line_number)

    @property
    def unignore_rule(self) -> str:
        return f"!{self.name}/"

    def to_dict(self):
        return {
            'name': self.name,
            'locator': self.locator,
            'line': self.line_number,
        }


def iter_entries(lines: Iterable[str]) -> Generator[SourceEntry, None, None]:
    """
    Parse source entries from lines of text.

    Blank lines and lines whose first non-whitespace character is ``#``
    are skipped.
    """
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        yield SourceEntry.from_locator(line, line_number=line_number)


def read_entries(path) -> Generator[SourceEntry, None, None]:
    """
    Open the list file at ``path`` and yield its entries.

    The file is opened eagerly so an unreadable list fails before any
    entry is processed; each call re-reads the file.

    Raises:
        ListFileError: if the file cannot be opened or decoded
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ListFileError(str(path), e.strerror if isinstance(e, OSError) and e.strerror else str(e)) from e
    return iter_entries(text.splitlines())
