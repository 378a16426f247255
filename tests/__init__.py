# Auto-generated __init__.py

from . import conftest
from .conftest import make_project
from .conftest import sha1_text
from .conftest import write_baseline
from .conftest import write_manifest
from .conftest import write_tree
from . import test_cli
from . import test_diff
from . import test_fingerprinter
from . import test_models
from . import test_project
from . import test_runner
from . import test_store

__all__ = [
    "conftest",
    "test_cli",
    "test_diff",
    "test_fingerprinter",
    "test_models",
    "test_project",
    "test_runner",
    "test_store",
    "make_project",
    "sha1_text",
    "write_baseline",
    "write_manifest",
    "write_tree",
]
