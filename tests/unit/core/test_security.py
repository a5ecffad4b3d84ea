"""Tests for password hashing."""

import pytest

from src.storefront.core.errors import ValidationError
from src.storefront.core.security import hash_password, verify_password


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_empty_or_malformed_hash_never_verifies(self):
        assert not verify_password("anything", "")
        assert not verify_password("anything", "not-a-bcrypt-hash")

    def test_rejects_password_over_72_bytes(self):
        # 36 two-byte characters fill the limit exactly.
        assert verify_password("é" * 36, hash_password("é" * 36))
        with pytest.raises(ValidationError):
            hash_password("é" * 37)
