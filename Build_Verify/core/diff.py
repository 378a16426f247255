from typing import Callable, Optional

from Build_Verify.core.models import (
    DiffResult,
    FileEvent,
    FileEventKind,
    FingerprintSet,
    PathEvent,
    PathEventKind,
)


def compare(
    baseline: FingerprintSet,
    current: FingerprintSet,
    ignore: Optional[Callable[[str], bool]] = None,
) -> DiffResult:
    """
    Classify every path in ``baseline`` ∪ ``current`` exactly once.

    One-sided paths become Added / Removed, or Ignored when ``ignore``
    says so. Paths present on both sides are classified on digest
    equality only: ignore rules never hide a content change.
    """
    result = DiffResult()

    base_paths = set(baseline.paths())
    curr_paths = set(current.paths())

    for path in sorted(base_paths ^ curr_paths):
        if ignore is not None and ignore(path):
            kind = PathEventKind.IGNORED
        elif path in base_paths:
            kind = PathEventKind.REMOVED
        else:
            kind = PathEventKind.ADDED
        result.path_events.append(PathEvent(kind, path))

    for path in sorted(base_paths & curr_paths):
        old, new = baseline[path], current[path]
        if old == new:
            result.file_events.append(FileEvent(FileEventKind.MATCHES, path))
        else:
            result.file_events.append(
                FileEvent(FileEventKind.DIFFERS, path, old_digest=old, new_digest=new)
            )

    return result
