"""Property-based tests for the credential encryption round trip."""

from hypothesis import given, settings, strategies as st

from mexc_dashboard.security.encryption import EncryptionCodec


CODEC = EncryptionCodec("property-test-master-secret")

api_secrets = st.text(max_size=128)


@settings(max_examples=50, deadline=None)
@given(secret=api_secrets)
def test_round_trip_restores_plaintext(secret):
    assert CODEC.decrypt_or_raise(CODEC.encrypt(secret)) == secret


@settings(max_examples=50, deadline=None)
@given(secret=api_secrets)
def test_repeated_encryption_differs(secret):
    first = CODEC.encrypt(secret)
    second = CODEC.encrypt(secret)

    assert first != second
    assert CODEC.decrypt(first).data == CODEC.decrypt(second).data == secret


@settings(max_examples=50, deadline=None)
@given(secret=api_secrets)
def test_envelope_shape(secret):
    iv_hex, ciphertext_hex = CODEC.encrypt(secret).split(':')

    assert len(iv_hex) == 32
    ciphertext = bytes.fromhex(ciphertext_hex)
    assert len(ciphertext) % 16 == 0
    assert len(ciphertext) > len(secret.encode('utf-8'))
