import asyncio
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional

from Build_Verify.core.diff import compare
from Build_Verify.core.errors import VerifyIOError
from Build_Verify.core.fingerprinter import DEFAULT_WORKERS, compute_fingerprints_async
from Build_Verify.core.hashing import DEFAULT_ALGORITHM
from Build_Verify.core.logger import LogSink, log as default_log
from Build_Verify.core.models import FingerprintSet, VerificationOutcome
from Build_Verify.core.store import load_fingerprints, save_fingerprints
from Build_Verify.project.base import DEFAULT_MANIFEST, Project, load_project


BASELINE_FILENAME = "hashes.txt"

PathPredicate = Callable[[str], bool]


def _resolve(project_root: Path, name) -> Path:
    path = Path(name)
    return path if path.is_absolute() else project_root / path


async def _build_and_fingerprint(
    project_root: Path,
    *,
    manifest,
    exclude: Optional[PathPredicate],
    algorithm: str,
    workers: int,
    build: bool,
    backend: Optional[str],
    log: LogSink,
) -> tuple[Project, FingerprintSet]:
    project = load_project(
        _resolve(project_root, manifest),
        project_root,
        backend=backend,
        log=log,
    )

    if build:
        log("INFO", "runner", f"Building {project_root}")
        await asyncio.get_running_loop().run_in_executor(None, project.run)
    else:
        log("INFO", "runner", f"Skipping build for {project_root}")

    current = await compute_fingerprints_async(
        project.output_dir,
        ignore=exclude,
        algorithm=algorithm,
        workers=workers,
        log=log,
    )
    return project, current


# ============================================================
# Verify
# ============================================================

async def verify(
    project_root: Path,
    *,
    manifest=DEFAULT_MANIFEST,
    ignore: Optional[PathPredicate] = None,
    exclude: Optional[PathPredicate] = None,
    algorithm: str = DEFAULT_ALGORITHM,
    workers: int = DEFAULT_WORKERS,
    baseline=BASELINE_FILENAME,
    build: bool = True,
    backend: Optional[str] = None,
    log: LogSink = default_log,
) -> VerificationOutcome:
    """
    Build a project, hash its output and compare against the baseline.

    - ``ignore`` only affects paths present on one side of the diff
    - ``exclude`` keeps paths out of the current fingerprint set
    - every error propagates unchanged; there is no partial result
    """
    project_root = Path(project_root).resolve()

    project, current = await _build_and_fingerprint(
        project_root,
        manifest=manifest,
        exclude=exclude,
        algorithm=algorithm,
        workers=workers,
        build=build,
        backend=backend,
        log=log,
    )

    recorded = await asyncio.get_running_loop().run_in_executor(
        None,
        partial(
            load_fingerprints,
            _resolve(project_root, baseline),
            algorithm=algorithm,
            log=log,
        ),
    )

    diff = compare(recorded, current, ignore)
    outcome = VerificationOutcome.from_diff(
        diff,
        project_root=project_root,
        output_dir=Path(project.output_dir),
        current=current,
    )

    log(
        "INFO" if outcome.passed else "WARNING",
        "runner",
        (
            f"{project_root.name}: {'PASS' if outcome.passed else 'FAIL'} "
            f"(added={len(diff.added)} removed={len(diff.removed)} "
            f"differs={len(diff.differs)} ignored={len(diff.ignored)})"
        ),
    )
    return outcome


# ============================================================
# Record
# ============================================================

async def record(
    project_root: Path,
    *,
    manifest=DEFAULT_MANIFEST,
    exclude: Optional[PathPredicate] = None,
    algorithm: str = DEFAULT_ALGORITHM,
    workers: int = DEFAULT_WORKERS,
    baseline=BASELINE_FILENAME,
    build: bool = True,
    backend: Optional[str] = None,
    log: LogSink = default_log,
) -> FingerprintSet:
    """
    Build a project and store its output fingerprints as the new
    baseline.
    """
    project_root = Path(project_root).resolve()

    _, current = await _build_and_fingerprint(
        project_root,
        manifest=manifest,
        exclude=exclude,
        algorithm=algorithm,
        workers=workers,
        build=build,
        backend=backend,
        log=log,
    )

    await asyncio.get_running_loop().run_in_executor(
        None,
        partial(save_fingerprints, _resolve(project_root, baseline), current, log=log),
    )
    return current


# ============================================================
# Discovery
# ============================================================

def discover_projects(root: Path, manifest=DEFAULT_MANIFEST) -> List[Path]:
    """
    Immediate subdirectories of ``root`` that contain a manifest,
    in name order.
    """
    root = Path(root)
    if not root.is_dir():
        raise VerifyIOError(f"Project directory does not exist: {root}", stage="discover")
    return sorted(
        p for p in root.iterdir()
        if p.is_dir() and (p / manifest).is_file()
    )
