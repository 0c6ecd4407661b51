"""API credential validation."""

from .validator import CredentialValidator, ValidationReport, check_credential_format

__all__ = ['CredentialValidator', 'ValidationReport', 'check_credential_format']
