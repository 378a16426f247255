import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from Build_Verify.cli.runner import discover_projects, record, verify
from Build_Verify.core.errors import VerifyError, VerifyIOError
from Build_Verify.core.fingerprinter import IgnoreRules
from Build_Verify.core.logger import log


EXIT_PASSED = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2

SETTINGS_FILENAME = "verify.json"


# ----------------------------
# Settings
# ----------------------------

DEFAULT_SETTINGS = {
    "project": {
        "manifest": "manifest.yml",
        "baseline": "hashes.txt",
        "backend": None,
    },
    "fingerprint": {
        "algorithm": "sha1",
        "workers": 8,
        "exclude": [],
    },
    "verify": {
        "ignore": [],
    },
}


def load_settings(project_root: Path) -> Dict[str, Any]:
    """
    Defaults merged with ``<project_root>/verify.json`` section by section.
    """
    merged = json.loads(json.dumps(DEFAULT_SETTINGS))

    settings_path = Path(project_root) / SETTINGS_FILENAME
    if not settings_path.exists():
        return merged

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            user_settings = json.load(f)
    except (OSError, ValueError) as exc:
        raise VerifyIOError(f"Cannot load settings {settings_path}: {exc}", stage="settings") from exc

    if not isinstance(user_settings, dict):
        raise VerifyIOError(f"Settings {settings_path} must be a JSON object", stage="settings")

    for k, v in user_settings.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k].update(v)
        else:
            merged[k] = v

    return merged


def apply_overrides(
    settings: Dict[str, Any],
    *,
    manifest: Optional[str] = None,
    baseline: Optional[str] = None,
    backend: Optional[str] = None,
    algorithm: Optional[str] = None,
    workers: Optional[int] = None,
    ignore_patterns: Optional[List[str]] = None,
    exclude_patterns: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Command-line values win over settings; patterns are appended."""
    if manifest:
        settings["project"]["manifest"] = manifest
    if baseline:
        settings["project"]["baseline"] = baseline
    if backend:
        settings["project"]["backend"] = backend
    if algorithm:
        settings["fingerprint"]["algorithm"] = algorithm
    if workers is not None:
        settings["fingerprint"]["workers"] = workers
    if ignore_patterns:
        settings["verify"]["ignore"] = list(settings["verify"]["ignore"]) + list(ignore_patterns)
    if exclude_patterns:
        settings["fingerprint"]["exclude"] = list(settings["fingerprint"]["exclude"]) + list(exclude_patterns)
    return settings


def _build_kwargs(settings: Dict[str, Any], build: bool) -> Dict[str, Any]:
    exclude = IgnoreRules(settings["fingerprint"]["exclude"])
    return {
        "manifest": settings["project"]["manifest"],
        "baseline": settings["project"]["baseline"],
        "backend": settings["project"]["backend"],
        "algorithm": settings["fingerprint"]["algorithm"],
        "workers": int(settings["fingerprint"]["workers"]),
        "exclude": exclude or None,
        "build": build,
    }


# ----------------------------
# Commands
# ----------------------------

async def _verify_one(project_root: Path, *, build: bool, quiet: bool, overrides) -> bool:
    settings = apply_overrides(load_settings(project_root), **overrides)
    ignore = IgnoreRules(settings["verify"]["ignore"])

    outcome = await verify(
        project_root,
        ignore=ignore or None,
        log=log,
        **_build_kwargs(settings, build),
    )

    for line in outcome.report_lines():
        if quiet and line.startswith("File matches:"):
            continue
        print(line)

    if outcome.passed:
        print(f"✅ {project_root.name}: verification passed")
    else:
        print(f"❌ {project_root.name}: verification failed")
    return outcome.passed


async def _record_one(project_root: Path, *, build: bool, overrides) -> None:
    settings = apply_overrides(load_settings(project_root), **overrides)
    current = await record(project_root, log=log, **_build_kwargs(settings, build))
    print(
        f"✅ Recorded {len(current)} fingerprints to "
        f"{project_root / settings['project']['baseline']}"
    )


async def run(
    command: str,
    target: Path,
    *,
    build: bool = True,
    quiet: bool = False,
    manifest: Optional[str] = None,
    baseline: Optional[str] = None,
    backend: Optional[str] = None,
    algorithm: Optional[str] = None,
    workers: Optional[int] = None,
    ignore_patterns: Optional[List[str]] = None,
    exclude_patterns: Optional[List[str]] = None,
) -> int:
    """
    Run one CLI command and return the process exit status.

    verify → 0 passed, 1 mismatch
    record → 0
    suite  → 0 if every project passed, else 1
    any VerifyError → 2, reported with its stage
    """
    target = Path(target).resolve()
    overrides = {
        "manifest": manifest,
        "baseline": baseline,
        "backend": backend,
        "algorithm": algorithm,
        "workers": workers,
        "ignore_patterns": ignore_patterns,
        "exclude_patterns": exclude_patterns,
    }

    try:
        if command == "verify":
            passed = await _verify_one(target, build=build, quiet=quiet, overrides=overrides)
            return EXIT_PASSED if passed else EXIT_MISMATCH

        if command == "record":
            await _record_one(target, build=build, overrides=overrides)
            return EXIT_PASSED

        if command == "suite":
            projects = discover_projects(target, manifest or DEFAULT_SETTINGS["project"]["manifest"])
            if not projects:
                print(f"No projects found under {target}")
                return EXIT_PASSED

            failed = []
            for project_root in projects:
                print(f"\n== {project_root.name}")
                if not await _verify_one(project_root, build=build, quiet=quiet, overrides=overrides):
                    failed.append(project_root.name)

            print(f"\n{len(projects) - len(failed)}/{len(projects)} projects passed")
            for name in failed:
                print(f"  ❌ {name}")
            return EXIT_MISMATCH if failed else EXIT_PASSED

        raise ValueError(f"Unknown command: {command}")

    except VerifyError as exc:
        log("ERROR", "cli", f"[{exc.stage}] {exc}")
        print(f"❌ [{exc.stage}] {exc}")
        return EXIT_ERROR
    except ValueError as exc:
        # bad algorithm / worker count / command
        log("ERROR", "cli", f"[config] {exc}")
        print(f"❌ [config] {exc}")
        return EXIT_ERROR
