# Auto-generated __init__.py

from . import command
from .command import CommandProject
from . import base
from .base import BACKENDS
from .base import Project
from .base import load_manifest
from .base import load_project
from .base import register_backend

__all__ = [
    "base",
    "command",
    "BACKENDS",
    "CommandProject",
    "Project",
    "load_manifest",
    "load_project",
    "register_backend",
]
