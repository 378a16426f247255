import hashlib
import os
from pathlib import Path

import pytest

from Build_Verify.core import store
from Build_Verify.core.errors import BaselineParseError, VerifyIOError
from Build_Verify.core.logger import null_log
from Build_Verify.core.models import FingerprintSet
from Build_Verify.core.store import load_fingerprints, save_fingerprints


A = "1" * 40
B = "2" * 40
C = "3" * 40


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_save_then_load_roundtrip(tmp_path: Path):
    original = FingerprintSet({"z.txt": C, "a.txt": A, "dir/with space.txt": B})
    path = tmp_path / "hashes.txt"

    save_fingerprints(path, original, log=null_log)

    assert load_fingerprints(path, log=null_log) == original


def test_save_writes_sorted_two_space_lines(tmp_path: Path):
    path = tmp_path / "hashes.txt"

    save_fingerprints(path, FingerprintSet({"b.txt": B, "a.txt": A.upper()}), log=null_log)

    assert path.read_text(encoding="utf-8") == f"{A}  a.txt\n{B}  b.txt\n"


def test_save_replaces_existing_file_without_leftovers(tmp_path: Path):
    path = write(tmp_path / "hashes.txt", "old content\n")

    save_fingerprints(path, FingerprintSet({"a.txt": A}), log=null_log)

    assert path.read_text(encoding="utf-8") == f"{A}  a.txt\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["hashes.txt"]


def test_failed_save_keeps_original(tmp_path: Path, monkeypatch):
    path = write(tmp_path / "hashes.txt", f"{A}  a.txt\n")

    def boom(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(store.os, "replace", boom)

    with pytest.raises(VerifyIOError) as err:
        save_fingerprints(path, FingerprintSet({"b.txt": B}), log=null_log)

    assert err.value.stage == "save-baseline"
    assert path.read_text(encoding="utf-8") == f"{A}  a.txt\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["hashes.txt"]


def test_load_accepts_uppercase_and_blank_lines(tmp_path: Path):
    path = write(tmp_path / "hashes.txt", f"\n{A.replace('1', 'F')}  a.txt\n\n{B}  sub/b.txt")

    result = load_fingerprints(path, log=null_log)

    assert result["a.txt"] == "f" * 40
    assert result.paths() == ["a.txt", "sub/b.txt"]


def test_load_keeps_spaces_inside_paths(tmp_path: Path):
    path = write(tmp_path / "hashes.txt", f"{A}  my  file.txt\n")

    assert load_fingerprints(path, log=null_log).paths() == ["my  file.txt"]


def test_load_missing_file_raises_io_error(tmp_path: Path):
    with pytest.raises(VerifyIOError) as err:
        load_fingerprints(tmp_path / "hashes.txt", log=null_log)

    assert err.value.stage == "load-baseline"


@pytest.mark.parametrize(
    "line, fragment",
    [
        (f"{A} a.txt", "separator"),
        (f"{A[:-1]}  a.txt", "hex digits"),
        (f"{'g' * 40}  a.txt", "hexadecimal"),
        (f"{A}  ", "Empty path"),
        (f"{A}  ../a.txt", "escapes"),
    ],
)
def test_load_reports_malformed_lines(tmp_path: Path, line, fragment):
    path = write(tmp_path / "hashes.txt", f"{B}  ok.txt\n{line}\n")

    with pytest.raises(BaselineParseError) as err:
        load_fingerprints(path, log=null_log)

    assert err.value.line_no == 2
    assert err.value.path == path
    assert err.value.stage == "parse-baseline"
    assert fragment in str(err.value)


def test_load_rejects_duplicates_after_normalization(tmp_path: Path):
    path = write(tmp_path / "hashes.txt", f"{A}  a.txt\n{B}  ./a.txt\n")

    with pytest.raises(BaselineParseError) as err:
        load_fingerprints(path, log=null_log)

    assert "duplicate" in str(err.value)


def test_load_checks_digest_length_for_algorithm(tmp_path: Path):
    digest = hashlib.sha256(b"alpha").hexdigest()
    path = write(tmp_path / "hashes.txt", f"{digest}  a.txt\n")

    with pytest.raises(BaselineParseError):
        load_fingerprints(path, log=null_log)

    assert load_fingerprints(path, algorithm="sha256", log=null_log)["a.txt"] == digest


def test_roundtrip_preserves_digests_exactly(tmp_path: Path):
    entries = {f"f{i}.bin": hashlib.sha1(os.urandom(8)).hexdigest() for i in range(10)}
    path = tmp_path / "hashes.txt"

    save_fingerprints(path, FingerprintSet(entries), log=null_log)

    assert load_fingerprints(path, log=null_log).entries == entries


@pytest.mark.parametrize(
    "name",
    ["a\x0cb.txt", "a\x1cb.txt", "a\x1eb.txt", "a\x85b.txt", "a\u2028b.txt", "a\u2029b.txt", "a\vb.txt"],
)
def test_roundtrip_names_with_unicode_line_boundaries(tmp_path: Path, name):
    original = FingerprintSet({name: A, "plain.txt": B})
    path = tmp_path / "hashes.txt"

    save_fingerprints(path, original, log=null_log)
    loaded = load_fingerprints(path, log=null_log)

    assert loaded == original
    assert loaded[name] == A


def test_load_accepts_crlf_line_endings(tmp_path: Path):
    path = tmp_path / "hashes.txt"
    path.write_bytes(f"{A}  a.txt\r\n{B}  sub/b.txt\r\n".encode("utf-8"))

    result = load_fingerprints(path, log=null_log)

    assert result.entries == {"a.txt": A, "sub/b.txt": B}


def test_load_rejects_invalid_utf8(tmp_path: Path):
    path = tmp_path / "hashes.txt"
    path.write_bytes(A.encode("ascii") + b"  bad\xff.txt\n")

    with pytest.raises(VerifyIOError) as err:
        load_fingerprints(path, log=null_log)

    assert err.value.stage == "load-baseline"


def test_failed_write_removes_temp_file(tmp_path: Path, monkeypatch):
    path = write(tmp_path / "hashes.txt", f"{A}  a.txt\n")

    def boom(fd):
        raise RuntimeError("interrupted")

    monkeypatch.setattr(store.os, "fsync", boom)

    with pytest.raises(RuntimeError):
        save_fingerprints(path, FingerprintSet({"b.txt": B}), log=null_log)

    assert path.read_text(encoding="utf-8") == f"{A}  a.txt\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["hashes.txt"]


def test_unencodable_entry_raises_io_error_without_leftovers(tmp_path: Path):
    fingerprints = FingerprintSet({"a.txt": A})
    # bypasses add(), which would reject the name
    fingerprints.entries["bad\udcff.txt"] = B
    path = tmp_path / "hashes.txt"

    with pytest.raises(VerifyIOError) as err:
        save_fingerprints(path, fingerprints, log=null_log)

    assert err.value.stage == "save-baseline"
    assert list(tmp_path.iterdir()) == []
