from pathlib import Path
import hashlib


DEFAULT_ALGORITHM = "sha1"
CHUNK_SIZE = 1024 * 1024


def resolve_algorithm(algorithm: str) -> str:
    """
    Validate a hashlib algorithm name and return it lowercased.

    Variable-length digests (shake_*) are rejected: every digest in a
    baseline must have the same fixed length.
    """
    name = (algorithm or "").strip().lower()
    try:
        h = hashlib.new(name)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Unsupported hash algorithm: {algorithm!r}") from exc

    if h.digest_size == 0 or name.startswith("shake"):
        raise ValueError(f"Hash algorithm must have a fixed digest size: {algorithm!r}")

    return name


def hex_length(algorithm: str) -> int:
    return hashlib.new(resolve_algorithm(algorithm)).digest_size * 2


def hash_file(path: Path, algorithm: str = DEFAULT_ALGORITHM) -> str:
    h = hashlib.new(algorithm)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()
