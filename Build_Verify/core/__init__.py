# Auto-generated __init__.py

from . import errors
from .errors import BaselineParseError
from .errors import BuildError
from .errors import ManifestError
from .errors import VerifyError
from .errors import VerifyIOError
from . import logger
from .logger import log
from .logger import null_log
from .logger import setup_logging
from . import hashing
from .hashing import hash_file
from .hashing import hex_length
from .hashing import resolve_algorithm
from . import models
from .models import DiffResult
from .models import FileEvent
from .models import FileEventKind
from .models import FingerprintSet
from .models import PathEvent
from .models import PathEventKind
from .models import VerificationOutcome
from .models import normalize_path
from . import diff
from .diff import compare
from . import fingerprinter
from .fingerprinter import IgnoreRules
from .fingerprinter import compute_fingerprints
from .fingerprinter import compute_fingerprints_async
from . import store
from .store import dumps_fingerprints
from .store import load_fingerprints
from .store import save_fingerprints

__all__ = [
    "diff",
    "errors",
    "fingerprinter",
    "hashing",
    "logger",
    "models",
    "store",
    "BaselineParseError",
    "BuildError",
    "DiffResult",
    "FileEvent",
    "FileEventKind",
    "FingerprintSet",
    "IgnoreRules",
    "ManifestError",
    "PathEvent",
    "PathEventKind",
    "VerificationOutcome",
    "VerifyError",
    "VerifyIOError",
    "compare",
    "compute_fingerprints",
    "compute_fingerprints_async",
    "dumps_fingerprints",
    "hash_file",
    "hex_length",
    "load_fingerprints",
    "log",
    "normalize_path",
    "null_log",
    "resolve_algorithm",
    "save_fingerprints",
    "setup_logging",
]
