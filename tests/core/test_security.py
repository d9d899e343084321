from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from chatbridge.core.exceptions import AuthenticationError, ConfigurationError
from chatbridge.core.security import (
    CredentialCipher,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


@pytest.mark.parametrize(
    "plaintext",
    ["sk-abc123", "", "http://localhost:11434", "ключ-🔑", "x" * 4096],
)
def test_cipher_round_trip(plaintext):
    cipher = CredentialCipher("a passphrase that is not a fernet key")

    token = cipher.encrypt(plaintext)

    assert token != plaintext
    assert cipher.decrypt(token) == plaintext


def test_cipher_accepts_raw_fernet_key():
    key = Fernet.generate_key().decode("ascii")
    cipher = CredentialCipher(key)

    token = cipher.encrypt("sk-raw")

    assert Fernet(key.encode("ascii")).decrypt(token.encode("ascii")) == b"sk-raw"


def test_cipher_requires_key():
    with pytest.raises(ConfigurationError):
        CredentialCipher(None)
    with pytest.raises(ConfigurationError):
        CredentialCipher("")


def test_cipher_rejects_token_from_other_key():
    token = CredentialCipher("first-key").encrypt("sk-secret")

    with pytest.raises(ConfigurationError):
        CredentialCipher("second-key").decrypt(token)


def test_password_hashing():
    password_hash = hash_password("wonderland")

    assert password_hash != "wonderland"
    assert verify_password("wonderland", password_hash) is True
    assert verify_password("looking-glass", password_hash) is False


def test_access_token_round_trip():
    token = create_access_token(7, "alice", "jwt-secret", expires_minutes=5)

    payload = decode_access_token(token, "jwt-secret")

    assert payload["sub"] == "7"
    assert payload["username"] == "alice"


def test_access_token_rejects_wrong_secret_and_expiry():
    token = create_access_token(7, "alice", "jwt-secret", expires_minutes=5)
    expired = create_access_token(7, "alice", "jwt-secret", expires_minutes=-1)

    with pytest.raises(AuthenticationError):
        decode_access_token(token, "other-secret")
    with pytest.raises(AuthenticationError):
        decode_access_token(expired, "jwt-secret")
