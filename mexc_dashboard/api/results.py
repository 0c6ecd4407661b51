"""
Typed results and error-body parsing for exchange calls.

Expected failures (bad key, timeout, unknown symbol) come back as an
``ExchangeResult`` with ``success=False``; callers branch on the tag.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class ErrorKind(str, Enum):
    """Bucket of the error taxonomy a failed result belongs to."""

    TIMEOUT = "timeout"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    EXCHANGE = "exchange"
    DATA = "data"
    RATE_LIMITED = "rate_limited"
    ENCRYPTION = "encryption"
    INVALID_REQUEST = "invalid_request"


RETRYABLE_KINDS = frozenset([ErrorKind.TIMEOUT, ErrorKind.NETWORK])

# Remediation hints for known MEXC error codes. Used for diagnostics only.
ERROR_HINTS: Dict[str, str] = {
    "-1021": "Timestamp outside of recvWindow. Check system time synchronization.",
    "-1022": "Signature verification failed. Check API secret and signature generation.",
    "-2014": "API key format invalid. Check API key format.",
    "-2015": "Invalid API-key, IP, or permissions for action. Check API key permissions and IP whitelist.",
    "1": "Generic error. Check API key and permissions.",
    "10001": "Invalid parameter. Check request parameters.",
    "10002": "Invalid signature. Check signature generation method.",
    "700002": "Signature for this request is not valid. Check API secret.",
    "700003": "Timestamp outside of recvWindow. Check system time synchronization.",
    "700006": "IP is not in the API key whitelist.",
}

AUTH_ERROR_CODES = frozenset(["-1021", "-1022", "-2014", "-2015", "10002", "700002", "700003", "700006"])


@dataclass(frozen=True)
class ExchangeResult:
    """Tagged outcome of a single exchange call."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    code: Optional[str] = None
    kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None
    raw_body: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, status_code: Optional[int] = None) -> 'ExchangeResult':
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, error: str, code: Optional[str] = None,
             kind: ErrorKind = ErrorKind.EXCHANGE,
             status_code: Optional[int] = None,
             raw_body: Optional[str] = None) -> 'ExchangeResult':
        return cls(
            success=False,
            error=error,
            code=code,
            kind=kind,
            status_code=status_code,
            raw_body=raw_body
        )

    @property
    def retryable(self) -> bool:
        return not self.success and self.kind in RETRYABLE_KINDS

    @property
    def hint(self) -> Optional[str]:
        return ERROR_HINTS.get(self.code) if self.code else None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {'success': True, 'data': self.data}
        result = {'success': False, 'error': self.error}
        if self.code is not None:
            result['code'] = self.code
        return result


@dataclass(frozen=True)
class ParsedErrorBody:
    """Error body that matched the ``{"code": ..., "msg": ...}`` shape."""

    code: Optional[str]
    message: Optional[str]


@dataclass(frozen=True)
class RawErrorBody:
    """Error body that could not be interpreted; kept verbatim."""

    text: str


ErrorBody = Union[ParsedErrorBody, RawErrorBody]


def _code_to_str(code: Any) -> Optional[str]:
    if code is None or isinstance(code, bool):
        return None
    if isinstance(code, (int, float, str)):
        text = str(code).strip()
        return text or None
    return None


def parse_error_body(text: str) -> ErrorBody:
    """
    Best-effort parse of an exchange error body.

    A JSON object carrying ``code`` and/or ``msg``/``message`` becomes a
    ``ParsedErrorBody``; anything else falls back to ``RawErrorBody``.
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        return RawErrorBody(text=text or '')

    if not isinstance(payload, dict):
        return RawErrorBody(text=text)

    message = payload.get('msg') or payload.get('message')
    code = _code_to_str(payload.get('code'))

    if message is None and code is None:
        return RawErrorBody(text=text)

    return ParsedErrorBody(code=code, message=str(message) if message is not None else None)
