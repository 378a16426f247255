from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

import yaml

from Build_Verify.core.errors import ManifestError, VerifyIOError
from Build_Verify.core.logger import LogSink, log as default_log
from Build_Verify.project.command import CommandProject


DEFAULT_MANIFEST = "manifest.yml"
DEFAULT_BACKEND = "command"


class Project(Protocol):
    """
    Build capability the verifier needs: run the build, then expose
    where its artifacts landed.
    """
    output_dir: Path

    def run(self) -> None:
        ...


ProjectFactory = Callable[[Dict[str, Any], Path, LogSink], Project]


# ----------------------------
# Backend registry
# ----------------------------

BACKENDS: Dict[str, ProjectFactory] = {
    "command": CommandProject.from_manifest,
}


def register_backend(name: str, factory: ProjectFactory) -> None:
    BACKENDS[name] = factory


# ----------------------------
# Manifest loading
# ----------------------------

def load_manifest(path: Path) -> Dict[str, Any]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise VerifyIOError(f"Cannot find manifest {path}: {exc}", stage="manifest") from exc

    try:
        manifest = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(manifest, dict):
        raise ManifestError(f"Manifest {path} must be a mapping")

    return manifest


def load_project(
    manifest_path: Path,
    project_root: Optional[Path] = None,
    *,
    backend: Optional[str] = None,
    log: LogSink = default_log,
) -> Project:
    """
    Build a Project from its manifest.

    Backend resolution: explicit argument, then the manifest's
    "backend" key, then "command".
    """
    manifest_path = Path(manifest_path)
    root = Path(project_root) if project_root is not None else manifest_path.parent

    manifest = load_manifest(manifest_path)
    name = backend or manifest.get("backend") or DEFAULT_BACKEND

    factory = BACKENDS.get(name)
    if factory is None:
        known = ", ".join(sorted(BACKENDS))
        raise ManifestError(f"Unknown project backend {name!r} (known: {known})")

    log("INFO", "project", f"Loaded {manifest_path} with backend {name!r}")
    return factory(manifest, root, log)
