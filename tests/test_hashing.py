"""Tests for infrareport.hashing module."""

import hashlib

import pytest

from infrareport.hashing import compute_content_hash, compute_text_hash, hash_file


class TestComputeContentHash:
    """Tests for compute_content_hash function."""

    def test_identical_bytes_identical_hash(self, png_bytes):
        """Test that hashing is deterministic."""
        assert compute_content_hash(png_bytes) == compute_content_hash(bytes(png_bytes))

    def test_different_bytes_different_hash(self):
        """Test that a single changed byte changes the hash."""
        assert compute_content_hash(b"abc") != compute_content_hash(b"abd")

    def test_is_sha256_hex(self):
        """Test the digest format."""
        assert compute_content_hash(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_empty_input(self):
        """Test hashing empty bytes."""
        assert len(compute_content_hash(b"")) == 64


class TestComputeTextHash:
    """Tests for compute_text_hash function."""

    def test_utf8_text(self):
        """Test that text is hashed as UTF-8."""
        assert compute_text_hash("₹3,00,000") == hashlib.sha256("₹3,00,000".encode("utf-8")).hexdigest()


class TestHashFile:
    """Tests for hash_file function."""

    def test_matches_content_hash(self, image_file, png_bytes):
        """Test that hashing a file equals hashing its bytes."""
        assert hash_file(image_file) == compute_content_hash(png_bytes)

    def test_missing_file_raises(self, temp_dir):
        """Test that I/O errors propagate."""
        with pytest.raises(OSError):
            hash_file(temp_dir / "missing.png")
