import hashlib
import sys
from pathlib import Path

import pytest
import yaml


GENERATOR = """\
from pathlib import Path

out = Path("out")
(out / "sub").mkdir(parents=True, exist_ok=True)
(out / "a.txt").write_text("alpha", encoding="utf-8")
(out / "sub" / "b.txt").write_text("beta", encoding="utf-8")
"""


# ----------------------------
# Helpers
# ----------------------------

def sha1_text(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def write_tree(root: Path, files: dict) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def write_manifest(root: Path, manifest: dict, name: str = "manifest.yml") -> Path:
    path = root / name
    path.write_text(yaml.safe_dump(manifest), encoding="utf-8")
    return path


def write_baseline(root: Path, entries: dict, name: str = "hashes.txt") -> Path:
    path = root / name
    path.write_text(
        "".join(f"{digest}  {rel}\n" for rel, digest in sorted(entries.items())),
        encoding="utf-8",
    )
    return path


def make_project(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "gen.py").write_text(GENERATOR, encoding="utf-8")
    write_manifest(root, {"steps": [[sys.executable, "gen.py"]]})
    return root


# ----------------------------
# Fixtures
# ----------------------------

@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """A command-backend project whose build writes out/a.txt and out/sub/b.txt."""
    return make_project(tmp_path / "project")


@pytest.fixture
def sample_baseline(sample_project: Path) -> Path:
    """sample_project with a hashes.txt matching its build output."""
    write_baseline(
        sample_project,
        {"a.txt": sha1_text("alpha"), "sub/b.txt": sha1_text("beta")},
    )
    return sample_project


@pytest.fixture
def log_records():
    records = []

    def sink(level: str, source: str, message: str) -> None:
        records.append((level, source, message))

    sink.records = records
    return sink
