# Auto-generated __init__.py

__version__ = "0.1.0"

from . import core
from . import project
from . import cli

__all__ = [
    "cli",
    "core",
    "project",
]
