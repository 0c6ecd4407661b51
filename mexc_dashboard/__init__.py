"""
MEXC Dashboard core.

Signed exchange API client, credential validation pipeline, at-rest secret
encryption and order-submission rate gating used by the dashboard.
"""

__version__ = "0.1.0"
