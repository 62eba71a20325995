"""Tests for password hashing and token generation."""

import bcrypt

from devdaily.infrastructure.config import Settings
from devdaily.infrastructure.security import generate_token, hash_password, verify_password


class TestPasswordHashing:
    def test_hash_is_bcrypt(self) -> None:
        password_hash = hash_password("secret-pass")

        assert password_hash.startswith("$2b$04$")
        assert bcrypt.checkpw(b"secret-pass", password_hash.encode())

    def test_default_cost_is_twelve(self) -> None:
        assert Settings().bcrypt_rounds == 12

    def test_explicit_rounds(self) -> None:
        assert hash_password("secret-pass", rounds=5).startswith("$2b$05$")

    def test_verify(self) -> None:
        password_hash = hash_password("secret-pass")

        assert verify_password("secret-pass", password_hash) is True
        assert verify_password("wrong-pass", password_hash) is False

    def test_salts_differ(self) -> None:
        assert hash_password("secret-pass") != hash_password("secret-pass")

    def test_non_bcrypt_hash_does_not_verify(self) -> None:
        assert verify_password("secret-pass", "pbkdf2_sha256$1$salt$abcdef") is False


class TestTokens:
    def test_tokens_are_unique(self) -> None:
        assert generate_token() != generate_token()
        assert len(generate_token()) >= 40
