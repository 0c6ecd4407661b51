"""
Request signing for MEXC authenticated endpoints.

MEXC verifies an HMAC-SHA256 of the exact query string, so parameters are
serialized deterministically: ``None`` dropped, keys sorted, values
form-encoded.
"""

import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlencode


def _now_ms() -> int:
    return int(time.time() * 1000)


def _serialize_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def canonical_params(params: Mapping[str, Any]) -> Dict[str, str]:
    """Return params as an ordered str->str mapping sorted by key, without None values."""
    return {
        key: _serialize_value(params[key])
        for key in sorted(params)
        if params[key] is not None
    }


def build_query_string(params: Mapping[str, Any]) -> str:
    return urlencode(canonical_params(params))


def sign(query_string: str, secret: str) -> str:
    """HMAC-SHA256 of ``query_string`` keyed by ``secret``, as lowercase hex."""
    return hmac.new(
        secret.encode('utf-8'),
        query_string.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()


@dataclass(frozen=True)
class SignedRequest:
    """A request whose parameters are bound to the secret by ``signature``."""

    endpoint: str
    method: str
    params: Dict[str, str]
    timestamp: int
    signature: str

    @property
    def query_string(self) -> str:
        return urlencode(self.params)

    @property
    def signed_query_string(self) -> str:
        return f"{self.query_string}&signature={self.signature}"


class Signer:
    """Signs request parameters with an account secret."""

    def __init__(self, secret: str, clock: Optional[Callable[[], int]] = None):
        if not secret:
            raise ValueError("Signer requires a non-empty secret")
        self._secret = secret
        self._clock = clock or _now_ms

    def sign_params(self, endpoint: str, method: str, params: Optional[Mapping[str, Any]] = None,
                    timestamp: Optional[int] = None) -> SignedRequest:
        """
        Add ``timestamp`` to ``params`` and sign the canonical query string.

        Args:
            endpoint: API path, e.g. ``/api/v3/account``
            method: HTTP method
            params: Request parameters; ``None`` values are dropped
            timestamp: Epoch milliseconds, defaults to the signer clock

        Returns:
            SignedRequest: canonical params (timestamp included) and signature
        """
        ts = int(timestamp if timestamp is not None else self._clock())
        all_params = dict(params or {})
        all_params['timestamp'] = ts

        ordered = canonical_params(all_params)
        signature = sign(urlencode(ordered), self._secret)

        return SignedRequest(
            endpoint=endpoint,
            method=method.upper(),
            params=ordered,
            timestamp=ts,
            signature=signature
        )

    def __repr__(self) -> str:
        return "Signer(secret=***)"
