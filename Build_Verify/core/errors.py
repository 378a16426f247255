from pathlib import Path
from typing import Optional


class VerifyError(Exception):
    """
    Base class for every failure that aborts a verification run.

    ``stage`` names the part of the pipeline that failed so the caller
    can report "build failed" rather than a generic error.
    """
    stage = "verify"

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class VerifyIOError(VerifyError):
    """Missing or unreadable file/directory, or a failed write."""
    stage = "io"


class BaselineParseError(VerifyError):
    """Raised when a baseline line is malformed."""
    stage = "parse-baseline"

    def __init__(self, message: str, *, path: Path, line_no: int):
        super().__init__(f"{path}:{line_no}: {message}")
        self.path = path
        self.line_no = line_no


class BuildError(VerifyError):
    """Raised by project backends when the build does not complete."""
    stage = "build"


class ManifestError(BuildError):
    """Raised when a project manifest cannot be turned into a Project."""
    stage = "manifest"
