import asyncio
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath
from typing import Callable, List, Optional, Tuple

from Build_Verify.core.errors import VerifyIOError
from Build_Verify.core.hashing import DEFAULT_ALGORITHM, hash_file, resolve_algorithm
from Build_Verify.core.logger import LogSink, log as default_log
from Build_Verify.core.models import FingerprintSet, normalize_path


DEFAULT_WORKERS = 8

PathPredicate = Callable[[str], bool]


# ============================================================
# Ignore rules
# ============================================================

class IgnoreRules:
    """
    Glob-style path predicate over normalized relative paths.

    A path matches when it equals a pattern, its final name equals a
    pattern, or it matches the pattern from the right ("*.log" matches
    "logs/run.log").
    """

    def __init__(self, patterns: Optional[List[str]] = None):
        self.patterns = list(patterns or [])

    def should_ignore(self, path: str) -> bool:
        rel = PurePosixPath(path)
        for pat in self.patterns:
            if path == pat or rel.name == pat or rel.match(pat):
                return True
        return False

    def __call__(self, path: str) -> bool:
        return self.should_ignore(path)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __repr__(self) -> str:
        return f"IgnoreRules({self.patterns!r})"


# ============================================================
# Walk
# ============================================================

def _walk_files(
    root: Path,
    ignore: Optional[PathPredicate],
    log: LogSink,
) -> List[Tuple[str, Path]]:
    """
    Collect (relative path, absolute path) for every regular file under
    root. Symlinks are never followed or hashed.
    """
    found: List[Tuple[str, Path]] = []
    pending = [(root, "")]

    while pending:
        directory, prefix = pending.pop()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise VerifyIOError(
                f"Cannot read directory {directory}: {exc}",
                stage="fingerprint",
            ) from exc

        subdirs = []
        for entry in entries:
            try:
                if "\\" in entry.name:
                    # baselines use "/" as the only separator
                    raise ValueError(f"File name contains a backslash: {entry.name!r}")
                rel = normalize_path(f"{prefix}{entry.name}")
            except ValueError as exc:
                raise VerifyIOError(
                    f"Unrepresentable file name under {directory}: {exc}",
                    stage="fingerprint",
                ) from exc

            if ignore and ignore(rel):
                log("DEBUG", "fingerprint", f"Excluded: {rel}")
                continue

            if entry.is_symlink():
                log("DEBUG", "fingerprint", f"Skipping symlink: {rel}")
                continue

            if entry.is_dir(follow_symlinks=False):
                subdirs.append((Path(entry.path), f"{rel}/"))
            elif entry.is_file(follow_symlinks=False):
                found.append((rel, Path(entry.path)))
            else:
                log("DEBUG", "fingerprint", f"Skipping special file: {rel}")

        # reversed so the stack pops subdirectories in name order
        pending.extend(reversed(subdirs))

    return found


def _hash_one(rel: str, path: Path, algorithm: str) -> Tuple[str, str]:
    try:
        return rel, hash_file(path, algorithm)
    except OSError as exc:
        raise VerifyIOError(
            f"Cannot read file {path}: {exc}",
            stage="fingerprint",
        ) from exc


# ============================================================
# ASYNC IMPLEMENTATION (single source of truth)
# ============================================================

async def compute_fingerprints_async(
    directory: Path,
    *,
    ignore: Optional[PathPredicate] = None,
    algorithm: str = DEFAULT_ALGORITHM,
    workers: int = DEFAULT_WORKERS,
    log: LogSink = default_log,
) -> FingerprintSet:
    """
    Hash every regular file under ``directory``.

    - Paths are recorded relative to ``directory``
    - ``ignore`` prunes directories and skips files before hashing
    - Hashing runs on at most ``workers`` threads; the resulting set
      does not depend on the order workers finish in
    """
    algorithm = resolve_algorithm(algorithm)
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    directory = Path(directory)
    if not directory.is_dir():
        raise VerifyIOError(
            f"Output directory does not exist: {directory}",
            stage="fingerprint",
        )

    root = directory.resolve()
    files = _walk_files(root, ignore, log)
    log("INFO", "fingerprint", f"Hashing {len(files)} files under {root} ({algorithm}, {workers} workers)")

    loop = asyncio.get_running_loop()
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = await asyncio.gather(
            *(
                loop.run_in_executor(executor, _hash_one, rel, path, algorithm)
                for rel, path in files
            )
        )

    fingerprints = FingerprintSet()
    for rel, digest in sorted(results):
        try:
            fingerprints.add(rel, digest)
        except ValueError as exc:
            raise VerifyIOError(str(exc), stage="fingerprint") from exc

    return fingerprints


# ============================================================
# SYNC WRAPPER
# ============================================================

def compute_fingerprints(
    directory: Path,
    ignore: Optional[PathPredicate] = None,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    workers: int = DEFAULT_WORKERS,
    log: LogSink = default_log,
):
    """
    Sync wrapper for compute_fingerprints_async.
    Inside a running loop a Task is returned for the caller to await.
    """
    coro = compute_fingerprints_async(
        directory,
        ignore=ignore,
        algorithm=algorithm,
        workers=workers,
        log=log,
    )
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        return loop.create_task(coro)
