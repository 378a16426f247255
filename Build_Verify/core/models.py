import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Optional, Tuple


HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


# ============================================================
# Paths
# ============================================================

def normalize_path(path: str) -> str:
    """
    Canonical relative form used as a FingerprintSet key.

    - backslashes become forward slashes
    - "./" segments, repeated and trailing separators are dropped
    - absolute paths, ".." segments, line breaks and names that are
      not valid UTF-8 are rejected
    """
    if "\n" in path or "\r" in path:
        raise ValueError(f"Path contains a line break: {path!r}")
    try:
        path.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError(f"Path is not valid UTF-8: {path!r}") from exc

    text = path.replace("\\", "/")
    if text.startswith("/"):
        raise ValueError(f"Path must be relative: {path!r}")

    parts = [p for p in text.split("/") if p not in ("", ".")]
    if not parts:
        raise ValueError(f"Empty path: {path!r}")
    if ".." in parts:
        raise ValueError(f"Path escapes its root: {path!r}")

    return str(PurePosixPath(*parts))


# ============================================================
# Fingerprints
# ============================================================

@dataclass
class FingerprintSet:
    """
    Mapping from normalized relative path to lowercase hex digest.

    Equality ignores insertion order; iteration is always sorted so
    serialization and reports are reproducible. All digests in a set
    share one length.
    """
    entries: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        raw = self.entries
        self.entries = {}
        for path, digest in raw.items():
            self.add(path, digest)

    def add(self, path: str, digest: str) -> None:
        key = normalize_path(path)
        if key in self.entries:
            raise ValueError(f"Duplicate path in fingerprint set: {key}")
        if not isinstance(digest, str) or not HEX_RE.match(digest):
            raise ValueError(f"Digest for {key} is not hexadecimal: {digest!r}")
        if self.entries:
            expected = len(next(iter(self.entries.values())))
            if len(digest) != expected:
                raise ValueError(
                    f"Digest for {key} has {len(digest)} hex digits, set uses {expected}"
                )
        self.entries[key] = digest.lower()

    def _key(self, path: object) -> Optional[str]:
        if not isinstance(path, str):
            return None
        try:
            return normalize_path(path)
        except ValueError:
            return None

    def get(self, path: str) -> Optional[str]:
        return self.entries.get(self._key(path))

    def paths(self) -> List[str]:
        return sorted(self.entries)

    def items(self) -> List[Tuple[str, str]]:
        return sorted(self.entries.items())

    def __getitem__(self, path: str) -> str:
        key = self._key(path)
        if key not in self.entries:
            raise KeyError(path)
        return self.entries[key]

    def __contains__(self, path: object) -> bool:
        return self._key(path) in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths())

    def __len__(self) -> int:
        return len(self.entries)


# ============================================================
# Diff events
# ============================================================

class PathEventKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    IGNORED = "ignored"


class FileEventKind(str, Enum):
    MATCHES = "matches"
    DIFFERS = "differs"


@dataclass(frozen=True)
class PathEvent:
    """A path present in only one of the two sets."""
    kind: PathEventKind
    path: str

    def describe(self) -> str:
        return f"File {self.kind.value}: {self.path}"


@dataclass(frozen=True)
class FileEvent:
    """A path present in both sets, classified by digest equality."""
    kind: FileEventKind
    path: str
    old_digest: Optional[str] = None
    new_digest: Optional[str] = None

    def describe(self) -> str:
        if self.kind is FileEventKind.DIFFERS:
            return f"File differs: {self.path} ({self.old_digest}->{self.new_digest})"
        return f"File matches: {self.path}"


@dataclass
class DiffResult:
    path_events: List[PathEvent] = field(default_factory=list)
    file_events: List[FileEvent] = field(default_factory=list)

    def _paths(self, kind) -> List[str]:
        events = self.path_events if isinstance(kind, PathEventKind) else self.file_events
        return [e.path for e in events if e.kind is kind]

    @property
    def added(self) -> List[str]:
        return self._paths(PathEventKind.ADDED)

    @property
    def removed(self) -> List[str]:
        return self._paths(PathEventKind.REMOVED)

    @property
    def ignored(self) -> List[str]:
        return self._paths(PathEventKind.IGNORED)

    @property
    def matches(self) -> List[str]:
        return self._paths(FileEventKind.MATCHES)

    @property
    def differs(self) -> List[str]:
        return self._paths(FileEventKind.DIFFERS)

    @property
    def passed(self) -> bool:
        return not (self.added or self.removed or self.differs)

    def report_lines(self) -> List[str]:
        return [e.describe() for e in self.path_events] + [
            e.describe() for e in self.file_events
        ]


# ============================================================
# Verification result
# ============================================================

@dataclass
class VerificationOutcome:
    """
    Verdict of a single verification run.

    Transient: produced by the runner and consumed by the caller,
    never written to disk.
    """
    passed: bool
    diff: DiffResult

    project_root: Optional[Path] = None
    output_dir: Optional[Path] = None
    current: Optional[FingerprintSet] = None

    @classmethod
    def from_diff(cls, diff: DiffResult, **kwargs) -> "VerificationOutcome":
        return cls(passed=diff.passed, diff=diff, **kwargs)

    def report_lines(self) -> List[str]:
        return self.diff.report_lines()
