"""Secret encryption at rest."""

from .encryption import (
    DecryptionError,
    EncryptionCodec,
    EncryptionError,
    InvalidEnvelopeFormat,
    derive_key,
)

__all__ = [
    'DecryptionError',
    'EncryptionCodec',
    'EncryptionError',
    'InvalidEnvelopeFormat',
    'derive_key',
]
