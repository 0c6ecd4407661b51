"""
Credential validation protocol.

Runs an ordered sequence of exchange calls over a freshly supplied API
key/secret and reports whether the pair can be trusted for trading. Only the
connectivity and credential steps abort; every later step adds warnings.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..api.client import MexcAPIClient
from ..config.settings import ValidationSettings
from ..data.models import Balance
from ..logging.trace import LoggingTraceHook, TraceHook


logger = logging.getLogger(__name__)


SPOT_PERMISSION = "SPOT"
WITHDRAW_PERMISSION = "WITHDRAWALS"
DEFAULT_ACCOUNT_TYPE = "SPOT"

MIN_CREDENTIAL_LENGTH = 16
_ALPHANUMERIC = re.compile(r'^[a-zA-Z0-9]+$')


@dataclass
class ValidationReport:
    """
    Outcome of a credential validation run.

    ``is_valid`` is derived from ``errors``; warnings never affect it.
    ``balances`` stays None when the account payload carried no balances.
    """

    permissions: List[str] = field(default_factory=list)
    account_type: str = "unknown"
    can_trade: bool = False
    can_withdraw: bool = False
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    balances: Optional[List[Balance]] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'is_valid': self.is_valid,
            'permissions': list(self.permissions),
            'account_type': self.account_type,
            'can_trade': self.can_trade,
            'can_withdraw': self.can_withdraw,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }
        if self.balances is not None:
            data['balances'] = [b.to_dict() for b in self.balances]
        return data


def check_credential_format(api_key: str, api_secret: str) -> ValidationReport:
    """
    Offline sanity check of a key/secret pair.

    MEXC keys and secrets are alphanumeric and at least 16 characters long.
    Returns a report whose errors describe each malformed value.
    """
    report = ValidationReport()

    if not api_key or not api_secret:
        report.errors.append("API Key and Secret are required")
        return report

    if len(api_key) < MIN_CREDENTIAL_LENGTH or not _ALPHANUMERIC.match(api_key):
        report.errors.append(
            "Invalid API Key format. MEXC API keys should be alphanumeric "
            f"and at least {MIN_CREDENTIAL_LENGTH} characters long."
        )

    if len(api_secret) < MIN_CREDENTIAL_LENGTH or not _ALPHANUMERIC.match(api_secret):
        report.errors.append(
            "Invalid API Secret format. MEXC API secrets should be alphanumeric "
            f"and at least {MIN_CREDENTIAL_LENGTH} characters long."
        )

    return report


class CredentialValidator:
    """
    Drives a ``MexcAPIClient`` through the validation protocol.

    Steps:
        1. connectivity (ping) - fatal
        2. credential validity (account) - fatal
        3. permission extraction
        4. account type
        5. non-zero balances
        6. trading pair probing (concurrent order book fetches)
        7. required permissions
        8. minimum reference-asset balance

    The validator only reads; persisting an accepted secret is up to the caller.
    """

    def __init__(self, client: MexcAPIClient,
                 settings: Optional[ValidationSettings] = None,
                 trace: Optional[TraceHook] = None):
        self.client = client
        self.settings = settings or ValidationSettings()
        self.trace = trace or LoggingTraceHook(logger)

    def validate(self) -> ValidationReport:
        report = ValidationReport()

        ping = self.client.ping()
        if not ping.success:
            report.errors.append(f"Connection failed: {ping.error}")
            self.trace.step_completed(1, "connectivity", False, ping.error)
            return report
        self.trace.step_completed(1, "connectivity", True)

        account_result = self.client.get_account()
        if not account_result.success:
            report.errors.append(f"Invalid credentials: {account_result.error}")
            self.trace.step_completed(2, "credentials", False, account_result.error)
            return report

        account = account_result.data
        if not isinstance(account, dict):
            report.errors.append("Invalid credentials: unexpected account payload")
            self.trace.step_completed(2, "credentials", False, "unexpected account payload")
            return report
        self.trace.step_completed(2, "credentials", True)

        self._extract_permissions(account, report)
        self._extract_account_type(account, report)
        self._extract_balances(account, report)
        self._probe_trading_pairs(report)
        self._check_required_permissions(report)
        self._check_minimum_balance(report)

        logger.info("Credential validation finished", extra={
            'is_valid': report.is_valid,
            'account_type': report.account_type,
            'permissions': report.permissions,
            'can_trade': report.can_trade,
            'can_withdraw': report.can_withdraw,
            'warning_count': len(report.warnings),
        })
        return report

    def _extract_permissions(self, account: Dict[str, Any], report: ValidationReport) -> None:
        permissions = account.get('permissions')
        if isinstance(permissions, str):
            permissions = [permissions]

        if not isinstance(permissions, (list, tuple)):
            # Policy: treat a payload without permissions as a spot-only key
            report.permissions = [SPOT_PERMISSION]
            report.can_trade = True
            report.can_withdraw = False
            self.trace.step_completed(3, "permissions", True, "permissions missing, assuming SPOT")
            return

        report.permissions = [str(p) for p in permissions]
        report.can_trade = SPOT_PERMISSION in report.permissions
        report.can_withdraw = WITHDRAW_PERMISSION in report.permissions
        self.trace.step_completed(3, "permissions", True, ', '.join(report.permissions))

    def _extract_account_type(self, account: Dict[str, Any], report: ValidationReport) -> None:
        report.account_type = account.get('accountType') or DEFAULT_ACCOUNT_TYPE
        self.trace.step_completed(4, "account_type", True, report.account_type)

    def _extract_balances(self, account: Dict[str, Any], report: ValidationReport) -> None:
        raw_balances = account.get('balances')
        if not isinstance(raw_balances, list):
            self.trace.step_completed(5, "balances", True, "no balances field")
            return

        balances = []
        for entry in raw_balances:
            balance = Balance.from_payload(entry)
            if balance is None:
                logger.debug(f"Skipping malformed balance entry: {entry!r}")
                continue
            if balance.is_nonzero():
                balances.append(balance)

        report.balances = balances
        self.trace.step_completed(
            5, "balances", True,
            f"{len(raw_balances)} total, {len(balances)} non-zero"
        )

    def _probe_trading_pairs(self, report: ValidationReport) -> None:
        symbols = sorted(set(s.upper() for s in self.settings.probe_symbols))
        if not symbols:
            self.trace.step_completed(6, "trading_pairs", True, "no symbols configured")
            return

        workers = max(1, min(self.settings.max_workers, len(symbols)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='symbol-probe') as executor:
            futures = {symbol: executor.submit(self.client.get_order_book, symbol) for symbol in symbols}

        unavailable = []
        for symbol in symbols:
            try:
                result = futures[symbol].result()
            except Exception as e:
                logger.warning(f"Could not check {symbol} availability: {e}")
                report.warnings.append(f"Could not verify {symbol} pair availability")
                unavailable.append(symbol)
                continue

            if not result.success:
                logger.warning(f"{symbol} pair not available: {result.error}")
                report.warnings.append(f"{symbol} pair may not be available")
                unavailable.append(symbol)

        self.trace.step_completed(
            6, "trading_pairs", not unavailable,
            f"unavailable: {', '.join(unavailable)}" if unavailable else None
        )

    def _check_required_permissions(self, report: ValidationReport) -> None:
        missing = [p for p in self.settings.required_permissions if p not in report.permissions]
        if missing:
            report.warnings.append(f"Missing permissions: {', '.join(missing)}")
        self.trace.step_completed(7, "required_permissions", not missing,
                                  ', '.join(missing) if missing else None)

    def _check_minimum_balance(self, report: ValidationReport) -> None:
        asset = self.settings.reference_asset
        minimum = self.settings.min_notional
        balance = next((b for b in report.balances or [] if b.asset == asset), None)

        if balance is None or balance.free_amount < Decimal(str(minimum)):
            report.warnings.append(
                f"Low {asset} balance. Minimum {minimum:g} {asset} required for trading"
            )
            self.trace.step_completed(8, "minimum_balance", False,
                                      balance.free if balance else "absent")
            return

        self.trace.step_completed(8, "minimum_balance", True, balance.free)
