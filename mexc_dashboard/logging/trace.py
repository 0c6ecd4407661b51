"""
Trace hooks for the exchange request flow and the validation protocol.

The client and the validator call a hook at fixed points instead of writing
to the console, so diagnostics can be captured, silenced or redirected.
"""

import logging
from typing import Any, Dict, Optional


class TraceHook:
    """Base hook; every callback is a no-op."""

    def request_started(self, method: str, endpoint: str, params: Dict[str, Any],
                        signed: bool) -> None:
        pass

    def response_received(self, method: str, endpoint: str, status_code: int,
                          elapsed_ms: float) -> None:
        pass

    def request_failed(self, method: str, endpoint: str, error: str,
                       code: Optional[str] = None, hint: Optional[str] = None) -> None:
        pass

    def step_completed(self, step: int, name: str, passed: bool,
                       detail: Optional[str] = None) -> None:
        pass


NullTraceHook = TraceHook


class LoggingTraceHook(TraceHook):
    """Writes trace events as structured log records."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('mexc_dashboard.trace')

    def request_started(self, method, endpoint, params, signed):
        self.logger.debug(f"API request started: {method} {endpoint}", extra={
            'trace_event': 'request_started',
            'http_method': method,
            'endpoint': endpoint,
            'param_names': sorted(params.keys()),
            'signed': signed,
        })

    def response_received(self, method, endpoint, status_code, elapsed_ms):
        self.logger.debug(f"API response received: {method} {endpoint} -> {status_code}", extra={
            'trace_event': 'response_received',
            'http_method': method,
            'endpoint': endpoint,
            'status_code': status_code,
            'elapsed_ms': round(elapsed_ms, 1),
        })

    def request_failed(self, method, endpoint, error, code=None, hint=None):
        self.logger.warning(f"API request failed: {method} {endpoint}: {error}", extra={
            'trace_event': 'request_failed',
            'http_method': method,
            'endpoint': endpoint,
            'error': error,
            'error_code': code,
            'hint': hint,
        })

    def step_completed(self, step, name, passed, detail=None):
        level = logging.INFO if passed else logging.WARNING
        self.logger.log(level, f"Validation step {step} ({name}) {'passed' if passed else 'failed'}", extra={
            'trace_event': 'step_completed',
            'step': step,
            'step_name': name,
            'passed': passed,
            'detail': detail,
        })
