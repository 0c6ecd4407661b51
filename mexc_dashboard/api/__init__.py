"""API client module for MEXC integration."""

from .cache import InMemoryResponseCache
from .client import MexcAPIClient, MexcAPIError
from .results import ErrorKind, ExchangeResult, ParsedErrorBody, RawErrorBody, parse_error_body
from .retry import RetryPolicy, call_with_retry, retrying
from .signer import SignedRequest, Signer, build_query_string, sign

__all__ = [
    'InMemoryResponseCache',
    'MexcAPIClient',
    'MexcAPIError',
    'ErrorKind',
    'ExchangeResult',
    'ParsedErrorBody',
    'RawErrorBody',
    'parse_error_body',
    'RetryPolicy',
    'call_with_retry',
    'retrying',
    'SignedRequest',
    'Signer',
    'build_query_string',
    'sign',
]
