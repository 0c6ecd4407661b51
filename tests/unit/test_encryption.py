"""Unit tests for secret encryption at rest."""

import logging
import re

import pytest

from conftest import TEST_MASTER_SECRET
from mexc_dashboard.api.results import ErrorKind
from mexc_dashboard.security.encryption import (
    DecryptionError,
    EncryptionCodec,
    EncryptionError,
    InvalidEnvelopeFormat,
    PLACEHOLDER_MASTER_SECRET,
)


SECRET = "testsecret0123456789abcdefghijklmnop"


def decrypted(codec, envelope):
    result = codec.decrypt(envelope)
    assert result.success, result.error
    return result.data


class TestEncryptionCodec:

    def test_round_trip(self, codec):
        assert decrypted(codec, codec.encrypt(SECRET)) == SECRET

    def test_round_trip_unicode(self, codec):
        assert decrypted(codec, codec.encrypt("clé secrète ✓")) == "clé secrète ✓"

    def test_round_trip_empty(self, codec):
        assert decrypted(codec, codec.encrypt("")) == ""

    def test_envelope_format(self, codec):
        envelope = codec.encrypt(SECRET)
        assert re.fullmatch(r'[0-9a-f]{32}:[0-9a-f]+', envelope)
        iv_hex, ct_hex = envelope.split(':')
        assert len(bytes.fromhex(ct_hex)) % 16 == 0

    def test_fresh_iv_per_encryption(self, codec):
        first = codec.encrypt(SECRET)
        second = codec.encrypt(SECRET)
        assert first != second
        assert first.split(':')[0] != second.split(':')[0]

    def test_same_master_secret_decrypts(self, codec):
        assert decrypted(EncryptionCodec(TEST_MASTER_SECRET), codec.encrypt(SECRET)) == SECRET

    def test_wrong_master_secret(self, codec):
        result = EncryptionCodec("another-master-secret").decrypt(codec.encrypt(SECRET))

        assert not result.success
        assert result.kind == ErrorKind.ENCRYPTION
        assert result.code == "DecryptionFailed"

    def test_salt_changes_key(self, codec):
        result = EncryptionCodec(TEST_MASTER_SECRET, salt="pepper").decrypt(codec.encrypt(SECRET))
        assert result.kind == ErrorKind.ENCRYPTION

    @pytest.mark.parametrize("envelope", ["no-separator", "a:b:c", "", None])
    def test_invalid_format(self, codec, envelope):
        result = codec.decrypt(envelope)

        assert not result.success
        assert result.kind == ErrorKind.ENCRYPTION
        assert result.code == "InvalidFormat"
        assert result.error == "Invalid encrypted text format"
        assert not result.retryable

    @pytest.mark.parametrize("envelope", [
        "zz:zz",
        "00:" + "00" * 16,
        "00" * 16 + ":" + "00" * 15,
    ])
    def test_corrupt_envelope(self, codec, envelope):
        result = codec.decrypt(envelope)

        assert result.code == "DecryptionFailed"
        assert result.error == "Failed to decrypt data"

    def test_empty_master_secret_rejected(self):
        with pytest.raises(ValueError):
            EncryptionCodec("")

    def test_repr_hides_key(self, codec):
        assert repr(codec) == "EncryptionCodec(key=***)"


class TestDecryptOrRaise:

    def test_returns_plaintext(self, codec):
        assert codec.decrypt_or_raise(codec.encrypt(SECRET)) == SECRET

    def test_invalid_format(self, codec):
        with pytest.raises(InvalidEnvelopeFormat):
            codec.decrypt_or_raise("malformed")

    def test_wrong_key(self, codec):
        with pytest.raises(DecryptionError):
            EncryptionCodec("another-master-secret").decrypt_or_raise(codec.encrypt(SECRET))

    def test_errors_share_base_class_and_carry_codes(self):
        assert issubclass(InvalidEnvelopeFormat, EncryptionError)
        assert issubclass(DecryptionError, EncryptionError)
        assert InvalidEnvelopeFormat.code == "InvalidFormat"
        assert DecryptionError.code == "DecryptionFailed"


class TestFromEnvironment:

    def test_reads_master_secret(self, monkeypatch):
        monkeypatch.setenv("CUSTOM_SECRET_VAR", "custom-master-secret")
        custom = EncryptionCodec.from_environment("CUSTOM_SECRET_VAR")
        assert decrypted(EncryptionCodec("custom-master-secret"), custom.encrypt(SECRET)) == SECRET

    def test_placeholder_when_unset(self, monkeypatch, caplog):
        monkeypatch.delenv("ENCRYPTION_SECRET", raising=False)

        with caplog.at_level(logging.WARNING):
            codec = EncryptionCodec.from_environment()

        assert "ENCRYPTION_SECRET is not set" in caplog.text
        assert decrypted(EncryptionCodec(PLACEHOLDER_MASTER_SECRET), codec.encrypt(SECRET)) == SECRET
