import os
import tempfile
from pathlib import Path

from Build_Verify.core.errors import BaselineParseError, VerifyIOError
from Build_Verify.core.hashing import DEFAULT_ALGORITHM, hex_length
from Build_Verify.core.logger import LogSink, log as default_log
from Build_Verify.core.models import HEX_RE, FingerprintSet, normalize_path


SEPARATOR = "  "


# ----------------------------
# Load
# ----------------------------

def load_fingerprints(
    path: Path,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    log: LogSink = default_log,
) -> FingerprintSet:
    """
    Parse a checksum file of ``<hex-digest>  <relative-path>`` lines.

    Blank lines are skipped. Every digest must have the length produced
    by ``algorithm``.
    """
    path = Path(path)
    expected = hex_length(algorithm)

    try:
        text = path.read_bytes().decode("utf-8")
    except OSError as exc:
        raise VerifyIOError(
            f"Cannot read baseline {path}: {exc}",
            stage="load-baseline",
        ) from exc
    except UnicodeDecodeError as exc:
        raise VerifyIOError(
            f"Baseline {path} is not valid UTF-8: {exc}",
            stage="load-baseline",
        ) from exc

    fingerprints = FingerprintSet()

    # split on "\n" only: form feeds, \x1c-\x1e, \u2028 etc. are legal in file names
    for line_no, line in enumerate(text.split("\n"), 1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip():
            continue

        digest, sep, rel = line.partition(SEPARATOR)
        if not sep:
            raise BaselineParseError(
                "missing two-space separator between digest and path",
                path=path,
                line_no=line_no,
            )
        if not HEX_RE.match(digest):
            raise BaselineParseError(
                f"digest is not hexadecimal: {digest!r}",
                path=path,
                line_no=line_no,
            )
        if len(digest) != expected:
            raise BaselineParseError(
                f"digest has {len(digest)} hex digits, expected {expected} for {algorithm}",
                path=path,
                line_no=line_no,
            )

        try:
            key = normalize_path(rel)
        except ValueError as exc:
            raise BaselineParseError(str(exc), path=path, line_no=line_no) from exc

        if key in fingerprints:
            raise BaselineParseError(
                f"duplicate entry for {key}",
                path=path,
                line_no=line_no,
            )

        fingerprints.add(key, digest)

    log("INFO", "store", f"Loaded {len(fingerprints)} fingerprints from {path}")
    return fingerprints


# ----------------------------
# Save
# ----------------------------

def dumps_fingerprints(fingerprints: FingerprintSet) -> str:
    return "".join(f"{digest}{SEPARATOR}{rel}\n" for rel, digest in fingerprints.items())


def save_fingerprints(
    path: Path,
    fingerprints: FingerprintSet,
    *,
    log: LogSink = default_log,
) -> Path:
    """
    Write entries sorted by path and atomically replace ``path``.
    Returns the destination path.
    """
    path = Path(path)
    text = dumps_fingerprints(fingerprints)

    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="\n",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_name = f.name
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except (OSError, UnicodeEncodeError) as exc:
        raise VerifyIOError(
            f"Cannot write baseline {path}: {exc}",
            stage="save-baseline",
        ) from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    log("INFO", "store", f"Saved {len(fingerprints)} fingerprints to {path}")
    return path
