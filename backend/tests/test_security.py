import pytest

from valet.core.security import (
    DecryptionError,
    decrypt,
    encrypt,
    generate_session_token,
    hash_password,
    hash_session_token,
    verify_password,
)


class TestPasswords:
    def test_hash_is_argon2_and_verifies(self):
        hashed = hash_password("s3cret-password")
        assert hashed.startswith("$argon2id$")
        assert verify_password("s3cret-password", hashed)

    def test_wrong_password_is_rejected(self):
        hashed = hash_password("s3cret-password")
        assert not verify_password("other-password", hashed)

    def test_garbage_hash_is_rejected_not_raised(self):
        assert not verify_password("anything", "not-a-hash")


class TestSessionTokens:
    def test_tokens_are_unique(self):
        assert generate_session_token() != generate_session_token()

    def test_only_digest_is_stable(self):
        token = generate_session_token()
        digest = hash_session_token(token)
        assert digest == hash_session_token(token)
        assert token not in digest
        assert len(digest) == 64


class TestEncryption:
    def test_ciphertext_hides_plaintext(self):
        ciphertext = encrypt("sk-ant-abc123")
        assert "sk-ant-abc123" not in ciphertext
        assert decrypt(ciphertext) == "sk-ant-abc123"

    def test_tampered_ciphertext_raises(self):
        with pytest.raises(DecryptionError):
            decrypt("gAAAAA-not-a-real-token")
