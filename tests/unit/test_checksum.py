import hashlib
import pytest
from core.exceptions import LocalIOError
from updater.checksum import compute_checksum


def test_checksum_is_sha256_of_content(tmp_path):
    path = tmp_path / "cars.csv"
    path.write_bytes(b"month,make,number\n2024-01,BMW,10\n")

    assert compute_checksum(path) == hashlib.sha256(path.read_bytes()).hexdigest()


def test_identical_content_gives_identical_checksum(tmp_path):
    first = tmp_path / "a.csv"
    second = tmp_path / "nested" / "b.csv"
    second.parent.mkdir()
    first.write_bytes(b"same bytes")
    second.write_bytes(b"same bytes")

    assert compute_checksum(first) == compute_checksum(second)


def test_whitespace_change_gives_different_checksum(tmp_path):
    path = tmp_path / "cars.csv"
    path.write_bytes(b"month,make\n2024-01,BMW\n")
    before = compute_checksum(path)

    path.write_bytes(b"month,make\n2024-01,BMW\n\n")

    assert compute_checksum(path) != before


def test_small_chunks_give_same_checksum(tmp_path):
    path = tmp_path / "big.csv"
    path.write_bytes(b"x" * 10_000)

    assert compute_checksum(path, chunk_size=7) == compute_checksum(path)


def test_missing_file_raises_local_io_error(tmp_path):
    with pytest.raises(LocalIOError) as exc_info:
        compute_checksum(tmp_path / "missing.csv")

    assert isinstance(exc_info.value.__cause__, FileNotFoundError)
