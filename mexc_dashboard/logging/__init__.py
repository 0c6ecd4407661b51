"""
Logging for the MEXC dashboard core.

Provides structured JSON logging with rotation, secret masking helpers and
the trace hooks used by the exchange client and credential validator.
"""

from .logger import LoggerManager, StructuredFormatter, get_logger, initialize_logging
from .trace import LoggingTraceHook, NullTraceHook, TraceHook
from .utils import log_execution_time, mask_api_key, mask_secret

__all__ = [
    'LoggerManager',
    'StructuredFormatter',
    'get_logger',
    'initialize_logging',
    'TraceHook',
    'NullTraceHook',
    'LoggingTraceHook',
    'log_execution_time',
    'mask_api_key',
    'mask_secret',
]
