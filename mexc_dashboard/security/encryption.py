"""
At-rest encryption of exchange API secrets.

Secrets are stored as ``hex(iv):hex(ciphertext)`` envelopes produced with
AES-256-CBC. The cipher key is derived from a master secret with scrypt, so
the master secret can be any length.
"""

import logging
import os
from typing import Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..api.results import ErrorKind, ExchangeResult


logger = logging.getLogger(__name__)


DEFAULT_SECRET_ENV = 'ENCRYPTION_SECRET'
PLACEHOLDER_MASTER_SECRET = 'your-secret-key-here-must-be-32-chars'
DEFAULT_KDF_SALT = b'salt'

KEY_LENGTH = 32
IV_LENGTH = 16
ENVELOPE_SEPARATOR = ':'


class EncryptionError(Exception):
    """Base class for encryption and decryption failures."""

    code = "EncryptionFailed"


class InvalidEnvelopeFormat(EncryptionError):
    """The envelope is not ``iv:ciphertext``."""

    code = "InvalidFormat"


class DecryptionError(EncryptionError):
    """The envelope could not be decrypted (corrupt data or wrong key)."""

    code = "DecryptionFailed"


def derive_key(master_secret: str, salt: bytes = DEFAULT_KDF_SALT) -> bytes:
    """Derive a 32-byte AES key from ``master_secret`` with scrypt (N=16384, r=8, p=1)."""
    kdf = Scrypt(salt=salt, length=KEY_LENGTH, n=2 ** 14, r=8, p=1)
    return kdf.derive(master_secret.encode('utf-8'))


class EncryptionCodec:
    """
    Symmetric codec for secrets at rest.

    Every ``encrypt`` call uses a fresh random IV, so the same plaintext never
    produces the same envelope twice. ``decrypt`` either returns the exact
    plaintext or a tagged ``ENCRYPTION`` failure; it never raises for a bad
    envelope.
    """

    def __init__(self, master_secret: str, salt: Union[str, bytes] = DEFAULT_KDF_SALT):
        """
        Args:
            master_secret: Secret the cipher key is derived from
            salt: scrypt salt; must match the one used for existing envelopes
        """
        if not master_secret:
            raise ValueError("master_secret must not be empty")
        if isinstance(salt, str):
            salt = salt.encode('utf-8')
        self._key = derive_key(master_secret, salt)

    @classmethod
    def from_environment(cls, env_var: str = DEFAULT_SECRET_ENV,
                         salt: Union[str, bytes] = DEFAULT_KDF_SALT) -> 'EncryptionCodec':
        """Build a codec from the master secret in ``env_var``."""
        master_secret = os.getenv(env_var)
        if not master_secret:
            logger.warning(f"{env_var} is not set, using the placeholder master secret")
            master_secret = PLACEHOLDER_MASTER_SECRET
        return cls(master_secret, salt=salt)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt ``plaintext`` into a ``hex(iv):hex(ciphertext)`` envelope."""
        iv = os.urandom(IV_LENGTH)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode('utf-8')) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return iv.hex() + ENVELOPE_SEPARATOR + ciphertext.hex()

    def decrypt(self, envelope: str) -> ExchangeResult:
        """
        Decrypt an envelope produced by ``encrypt``.

        Returns ``ExchangeResult.ok(plaintext)``, or a failure of kind
        ``ENCRYPTION`` whose ``code`` is ``InvalidFormat`` (not exactly
        ``iv:ciphertext``) or ``DecryptionFailed`` (corrupt data or wrong
        master secret).
        """
        try:
            return ExchangeResult.ok(self.decrypt_or_raise(envelope))
        except EncryptionError as e:
            return ExchangeResult.fail(str(e), code=e.code, kind=ErrorKind.ENCRYPTION)

    def decrypt_or_raise(self, envelope: str) -> str:
        """
        Raising variant of ``decrypt``.

        Raises:
            InvalidEnvelopeFormat: envelope is not exactly ``iv:ciphertext``
            DecryptionError: corrupt envelope or wrong master secret
        """
        if not isinstance(envelope, str):
            raise InvalidEnvelopeFormat("Invalid encrypted text format")

        parts = envelope.split(ENVELOPE_SEPARATOR)
        if len(parts) != 2:
            raise InvalidEnvelopeFormat("Invalid encrypted text format")

        iv_hex, ciphertext_hex = parts
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
            if len(iv) != IV_LENGTH:
                raise ValueError(f"IV must be {IV_LENGTH} bytes, got {len(iv)}")

            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()

            return plaintext.decode('utf-8')
        except ValueError as e:
            logger.error(f"Decryption error: {type(e).__name__}")
            raise DecryptionError("Failed to decrypt data") from e

    def __repr__(self) -> str:
        return "EncryptionCodec(key=***)"
