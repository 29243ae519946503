"""Content fingerprints used as cache key components."""

import hashlib
from pathlib import Path


def compute_content_hash(data: bytes) -> str:
    """Compute the SHA256 hex digest of raw image bytes.

    Args:
        data: The raw bytes of the source image.

    Returns:
        SHA256 hex digest of the bytes.
    """
    return hashlib.sha256(data).hexdigest()


def compute_text_hash(text: str) -> str:
    """Compute the SHA256 hex digest of a text (UTF-8 encoded).

    Args:
        text: Text to fingerprint, e.g. a full request prompt.

    Returns:
        SHA256 hex digest of the text.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_file(path: Path) -> str:
    """Compute the SHA256 hex digest of a file's contents.

    Raises:
        OSError: If the file cannot be read.
    """
    return compute_content_hash(Path(path).read_bytes())
