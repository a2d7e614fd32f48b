"""
Content fingerprinting for change detection
"""

import hashlib
from pathlib import Path
from typing import Union

from core.exceptions import LocalIOError

CHUNK_SIZE = 64 * 1024


def compute_checksum(file_path: Union[str, Path], chunk_size: int = CHUNK_SIZE) -> str:
    """
    SHA-256 hex digest of a file's bytes.

    Only content is hashed, so byte-identical files always produce the same
    checksum.

    Raises:
        LocalIOError: If the file cannot be read
    """
    digest = hashlib.sha256()
    try:
        with open(file_path, "rb") as fh:
            for chunk in iter(lambda: fh.read(chunk_size), b""):
                digest.update(chunk)
    except OSError as e:
        raise LocalIOError(
            "Failed to read file for checksum",
            context={"file_path": str(file_path)},
            original_exception=e
        )
    return digest.hexdigest()
