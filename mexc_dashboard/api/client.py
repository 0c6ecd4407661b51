"""
MEXC spot API client.

This module is the only place that speaks the exchange wire protocol. It
builds signed and public requests, enforces a per-call deadline and maps
transport and exchange failures into ``ExchangeResult`` values.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from .results import ERROR_HINTS, AUTH_ERROR_CODES, ErrorKind, ExchangeResult, ParsedErrorBody, parse_error_body
from .signer import Signer, build_query_string
from ..data.models import OrderRequest, OrderType
from ..logging.trace import LoggingTraceHook, TraceHook
from ..logging.utils import mask_api_key


logger = logging.getLogger(__name__)


class MexcAPIError(Exception):
    """Raised for programmer errors such as calling a signed endpoint without credentials."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


def format_number(value: Any) -> str:
    """Render a quantity/price without scientific notation."""
    if isinstance(value, str):
        return value
    return format(Decimal(str(value)).normalize(), 'f')


class MexcAPIClient:
    """
    MEXC REST client.

    Public endpoints (ping, depth, ticker, ...) are sent unsigned. Signed
    endpoints carry ``timestamp`` and ``signature`` in the query string and the
    API key in the ``X-MEXC-APIKEY`` header.

    No operation raises for expected failures; each returns an
    ``ExchangeResult``. Retries are left to callers (see ``api.retry``).
    """

    BASE_URL = "https://api.mexc.com"
    API_KEY_HEADER = "X-MEXC-APIKEY"
    DEFAULT_TIMEOUT = 15.0
    DEFAULT_DEPTH = 20
    USER_AGENT = "MEXC-Dashboard/0.1"

    ENDPOINTS = {
        'ping': "/api/v3/ping",
        'time': "/api/v3/time",
        'account': "/api/v3/account",
        'depth': "/api/v3/depth",
        'order': "/api/v3/order",
        'open_orders': "/api/v3/openOrders",
        'ticker_24hr': "/api/v3/ticker/24hr",
        'exchange_info': "/api/v3/exchangeInfo",
        'klines': "/api/v3/klines",
        'trades': "/api/v3/trades",
    }

    SUPPORTED_METHODS = ('GET', 'POST', 'DELETE')

    def __init__(self, api_key: Optional[str] = None, api_secret: Optional[str] = None,
                 base_url: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None,
                 trace: Optional[TraceHook] = None,
                 clock: Optional[Callable[[], int]] = None,
                 user_agent: Optional[str] = None):
        """
        Args:
            api_key: MEXC API key (only needed for signed endpoints)
            api_secret: MEXC API secret (only needed for signed endpoints)
            base_url: Override of the API base URL
            timeout: Deadline in seconds for the whole call, body included
            session: HTTP session, a new ``requests.Session`` by default
            trace: Hook notified at request start, response and failure
            clock: Epoch-millisecond clock used for request timestamps
            user_agent: User-Agent header value
        """
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.trace = trace or LoggingTraceHook(logger)
        self._signer = Signer(api_secret, clock=clock) if api_secret else None

        self.session.headers.update({
            'Content-Type': 'application/json',
            'User-Agent': user_agent or self.USER_AGENT,
        })

        if api_key:
            logger.debug("MEXC client initialized", extra={
                'base_url': self.base_url,
                'api_key': mask_api_key(api_key),
            })

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key) and self._signer is not None

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        return f"MexcAPIClient(base_url={self.base_url!r}, api_key={mask_api_key(self.api_key)!r})"

    def _build_url(self, endpoint: str, method: str, params: Optional[Dict[str, Any]],
                   signed: bool) -> str:
        if signed:
            if not self.has_credentials:
                raise MexcAPIError("API credentials not set")
            query = self._signer.sign_params(endpoint, method, params).signed_query_string
        else:
            query = build_query_string(params or {})

        url = f"{self.base_url}{endpoint}"
        return f"{url}?{query}" if query else url

    def _request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None,
                 signed: bool = False) -> ExchangeResult:
        """
        Send one request and convert the outcome into an ``ExchangeResult``.

        Raises:
            MexcAPIError: unsupported method, or signed call without credentials
        """
        method = method.upper()
        if method not in self.SUPPORTED_METHODS:
            raise MexcAPIError(f"Unsupported HTTP method: {method}")

        url = self._build_url(endpoint, method, params, signed)
        headers = {self.API_KEY_HEADER: self.api_key} if signed else {}

        self.trace.request_started(method, endpoint, dict(params or {}), signed)
        started = time.monotonic()

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='mexc-request')
        try:
            future = executor.submit(self._send, method, url, headers)
            response, text = future.result(timeout=self.timeout)
        except (FutureTimeout, requests.Timeout):
            self.trace.request_failed(method, endpoint, "timeout")
            return ExchangeResult.fail("timeout", kind=ErrorKind.TIMEOUT)
        except requests.RequestException as e:
            self.trace.request_failed(method, endpoint, f"network error: {e}")
            return ExchangeResult.fail("network error", kind=ErrorKind.NETWORK)
        finally:
            executor.shutdown(wait=False)

        elapsed_ms = (time.monotonic() - started) * 1000
        self.trace.response_received(method, endpoint, response.status_code, elapsed_ms)

        if not 200 <= response.status_code < 300:
            return self._error_result(method, endpoint, response, text)

        if not text.strip():
            return ExchangeResult.ok(None, status_code=response.status_code)

        try:
            data = json.loads(text)
        except ValueError:
            self.trace.request_failed(method, endpoint, "invalid response body")
            return ExchangeResult.fail(
                "invalid response body",
                kind=ErrorKind.DATA,
                status_code=response.status_code,
                raw_body=text
            )

        return ExchangeResult.ok(data, status_code=response.status_code)

    def _send(self, method: str, url: str, headers: Dict[str, str]) -> Tuple[requests.Response, str]:
        # Runs on a worker thread; the caller stops waiting at the deadline
        response = self.session.request(method, url, headers=headers, timeout=self.timeout)
        return response, response.text or ''

    def _error_result(self, method: str, endpoint: str, response: requests.Response,
                      text: str) -> ExchangeResult:
        status_line = f"MEXC API error: {response.status_code} {response.reason or ''}".rstrip()
        body = parse_error_body(text)

        if isinstance(body, ParsedErrorBody):
            message = body.message or status_line
            code = body.code
        else:
            message = body.text or status_line
            code = None

        if code in AUTH_ERROR_CODES:
            kind = ErrorKind.AUTHENTICATION
        elif response.status_code == 429:
            kind = ErrorKind.RATE_LIMITED
        else:
            kind = ErrorKind.EXCHANGE

        hint = ERROR_HINTS.get(code) if code else None
        self.trace.request_failed(method, endpoint, message, code=code, hint=hint)

        return ExchangeResult.fail(
            message,
            code=code,
            kind=kind,
            status_code=response.status_code,
            raw_body=text
        )

    # Public market data

    def ping(self) -> ExchangeResult:
        """Unauthenticated liveness check."""
        return self._request('GET', self.ENDPOINTS['ping'])

    def get_server_time(self) -> ExchangeResult:
        return self._request('GET', self.ENDPOINTS['time'])

    def get_exchange_info(self, symbol: Optional[str] = None) -> ExchangeResult:
        params = {'symbol': symbol.upper()} if symbol else None
        return self._request('GET', self.ENDPOINTS['exchange_info'], params)

    def get_order_book(self, symbol: str, limit: int = DEFAULT_DEPTH) -> ExchangeResult:
        """Depth snapshot for ``symbol``, 20 levels by default."""
        return self._request('GET', self.ENDPOINTS['depth'], {
            'symbol': symbol.upper(),
            'limit': limit,
        })

    def get_24hr_ticker(self, symbol: str) -> ExchangeResult:
        return self._request('GET', self.ENDPOINTS['ticker_24hr'], {'symbol': symbol.upper()})

    def get_klines(self, symbol: str, interval: str = "1m", limit: int = 100) -> ExchangeResult:
        return self._request('GET', self.ENDPOINTS['klines'], {
            'symbol': symbol.upper(),
            'interval': interval,
            'limit': limit,
        })

    def get_recent_trades(self, symbol: str, limit: int = 50) -> ExchangeResult:
        return self._request('GET', self.ENDPOINTS['trades'], {
            'symbol': symbol.upper(),
            'limit': limit,
        })

    # Signed endpoints

    def get_account(self) -> ExchangeResult:
        """Account permissions, type and balances."""
        return self._request('GET', self.ENDPOINTS['account'], signed=True)

    def place_order(self, order: OrderRequest) -> ExchangeResult:
        """
        Place a spot order.

        ``price`` is sent only for LIMIT orders. Time in force is GTC.

        Raises:
            ValueError: if the order request is malformed (e.g. LIMIT without price)
        """
        problem = order.validation_error()
        if problem:
            raise ValueError(f"Invalid order request: {problem}")

        params = {
            'symbol': order.symbol.upper(),
            'side': order.side.value,
            'type': order.type.value,
            'quantity': format_number(order.quantity),
            'timeInForce': 'GTC',
            'newOrderRespType': 'RESULT',
        }
        if order.type == OrderType.LIMIT:
            params['price'] = format_number(order.price)

        result = self._request('POST', self.ENDPOINTS['order'], params, signed=True)
        if result.success:
            order_id = result.data.get('orderId') if isinstance(result.data, dict) else None
            logger.info(f"Order placed: {order.side.value} {params['quantity']} {params['symbol']}", extra={
                'symbol': params['symbol'],
                'order_id': order_id,
            })
        return result

    def cancel_order(self, symbol: str, order_id: str) -> ExchangeResult:
        return self._request('DELETE', self.ENDPOINTS['order'], {
            'symbol': symbol.upper(),
            'orderId': order_id,
        }, signed=True)

    def cancel_all_orders(self, symbol: str) -> ExchangeResult:
        return self._request('DELETE', self.ENDPOINTS['open_orders'], {
            'symbol': symbol.upper(),
        }, signed=True)

    def get_open_orders(self, symbol: Optional[str] = None) -> ExchangeResult:
        params = {'symbol': symbol.upper()} if symbol else None
        return self._request('GET', self.ENDPOINTS['open_orders'], params, signed=True)
