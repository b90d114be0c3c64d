"""
Unit Tests for Record Encryption

Tests for the encrypted envelope format, authenticated decryption and
fail-closed behaviour on wrong keys or damaged ciphertext.
"""

import base64

import pytest

from syntra_core.exceptions import DecryptionError
from syntra_core.security.encryption import (
    EncryptedData,
    EncryptionAlgorithm,
    RecordEncryptor,
)


@pytest.fixture
def encryptor():
    """Create encryptor with low KDF cost."""
    return RecordEncryptor(iterations=1000)


RECORDS = [
    {"id": "1", "originalText": "I am so happy", "emotion": "happy"},
    {"id": "2", "originalText": "ñandú 日本語", "emotion": "neutral", "audioUrl": None},
]


# =============================================================================
# EncryptedData Tests
# =============================================================================


class TestEncryptedData:
    """Tests for EncryptedData serialization."""

    def test_to_bytes_and_from_bytes_roundtrip(self):
        """Test serialization roundtrip."""
        original = EncryptedData(
            ciphertext=b"test_ciphertext",
            key_id="test_key_123",
            salt=b"s" * 16,
            iv=b"i" * 12,
            tag=b"t" * 16,
            iterations=1000,
        )

        restored = EncryptedData.from_bytes(original.to_bytes())

        assert restored.ciphertext == original.ciphertext
        assert restored.algorithm == EncryptionAlgorithm.AES_256_GCM
        assert restored.key_id == original.key_id
        assert restored.salt == original.salt
        assert restored.iv == original.iv
        assert restored.tag == original.tag
        assert restored.iterations == 1000

    def test_from_base64_rejects_non_base64(self):
        """Test strict base64 decoding."""
        with pytest.raises(Exception):
            EncryptedData.from_base64("not base64 !!!")


# =============================================================================
# RecordEncryptor Tests
# =============================================================================


class TestRecordEncryptor:
    """Tests for record list encryption."""

    def test_roundtrip(self, encryptor):
        """Test decrypt(encrypt(x)) == x."""
        ciphertext = encryptor.encrypt_records(RECORDS, "k" * 64)

        assert encryptor.decrypt_records(ciphertext, "k" * 64) == RECORDS

    def test_empty_list_roundtrip(self, encryptor):
        """Test an empty record list survives encryption."""
        ciphertext = encryptor.encrypt_records([], "key")
        assert encryptor.decrypt_records(ciphertext, "key") == []

    def test_ciphertext_is_opaque(self, encryptor):
        """Test plaintext does not appear in the ciphertext."""
        ciphertext = encryptor.encrypt_records(RECORDS, "key")

        assert isinstance(ciphertext, str)
        assert "happy" not in ciphertext
        assert b"happy" not in base64.b64decode(ciphertext)

    def test_fresh_salt_and_iv_each_time(self, encryptor):
        """Test identical inputs produce different ciphertexts."""
        assert encryptor.encrypt_records(RECORDS, "key") != encryptor.encrypt_records(RECORDS, "key")

    def test_wrong_key_raises(self, encryptor):
        """Test a different key fails closed."""
        ciphertext = encryptor.encrypt_records(RECORDS, "key-one")

        with pytest.raises(DecryptionError):
            encryptor.decrypt_records(ciphertext, "key-two")

    def test_empty_key_cannot_encrypt(self, encryptor):
        """Test encryption requires a key."""
        with pytest.raises(ValueError):
            encryptor.encrypt_records(RECORDS, "")

    def test_tampered_ciphertext_raises(self, encryptor):
        """Test flipped ciphertext bits fail authentication."""
        envelope = EncryptedData.from_base64(encryptor.encrypt_records(RECORDS, "key"))
        flipped = bytes([envelope.ciphertext[0] ^ 0x01]) + envelope.ciphertext[1:]
        envelope.ciphertext = flipped

        with pytest.raises(DecryptionError):
            encryptor.decrypt_records(envelope.to_base64(), "key")

    def test_tampered_tag_raises(self, encryptor):
        """Test a replaced tag fails authentication."""
        envelope = EncryptedData.from_base64(encryptor.encrypt_records(RECORDS, "key"))
        envelope.tag = b"\x00" * 16

        with pytest.raises(DecryptionError):
            encryptor.decrypt_records(envelope.to_base64(), "key")

    @pytest.mark.parametrize("garbage", ["", "not base64 !!!", base64.b64encode(b"\x00\x00\x00\x05abc").decode()])
    def test_malformed_ciphertext_raises(self, encryptor, garbage):
        """Test garbage input is a DecryptionError, not a crash."""
        with pytest.raises(DecryptionError):
            encryptor.decrypt_records(garbage, "key")

    @pytest.mark.parametrize("iterations", [0, -5, 10**9, "1000", True])
    def test_bad_header_iterations_raise(self, encryptor, iterations):
        """Test a damaged iteration count in the header is a DecryptionError."""
        envelope = EncryptedData.from_base64(encryptor.encrypt_records(RECORDS, "key"))
        envelope.iterations = iterations

        with pytest.raises(DecryptionError):
            encryptor.decrypt_records(envelope.to_base64(), "key")

    def test_derive_failure_raises(self, encryptor):
        """Test an unusable envelope passed straight to decrypt_bytes fails closed."""
        envelope = encryptor.encrypt_bytes(b"[]", "key")
        envelope.iterations = 0

        with pytest.raises(DecryptionError):
            encryptor.decrypt_bytes(envelope, "key")

    def test_non_list_payload_raises(self, encryptor):
        """Test a payload that is not a record list is rejected."""
        envelope = encryptor.encrypt_bytes(b'{"not": "a list"}', "key")

        with pytest.raises(DecryptionError):
            encryptor.decrypt_records(envelope.to_base64(), "key")

    def test_iterations_travel_with_envelope(self):
        """Test decryption uses the iteration count stored in the header."""
        ciphertext = RecordEncryptor(iterations=1500).encrypt_records(RECORDS, "key")

        assert RecordEncryptor(iterations=1000).decrypt_records(ciphertext, "key") == RECORDS
