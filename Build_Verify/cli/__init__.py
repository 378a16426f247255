# Auto-generated __init__.py

from . import runner
from .runner import discover_projects
from .runner import record
from .runner import verify
from . import commands
from .commands import apply_overrides
from .commands import load_settings
from .commands import run

__all__ = [
    "commands",
    "runner",
    "apply_overrides",
    "discover_projects",
    "load_settings",
    "record",
    "run",
    "verify",
]
