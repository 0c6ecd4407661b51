"""
Composition root of the MEXC dashboard core.

Builds the shared services (encryption codec, rate window store, order
manager) from the loaded configuration and exposes the operations the
dashboard's outer layers call.
"""

from typing import Optional, Union

from .api.cache import InMemoryResponseCache
from .api.client import MexcAPIClient
from .api.results import ExchangeResult
from .config.manager import ConfigManager
from .config.settings import AppSettings
from .data.models import ExchangeAccount, OrderRequest, OrderSide
from .logging import LoggingTraceHook, TraceHook, get_logger, log_execution_time, mask_api_key
from .order.manager import OrderManager, OrderValidationResult
from .risk.rate_gate import AccountRateGate, InMemoryRateWindowStore
from .security.encryption import EncryptionCodec
from .validation.validator import CredentialValidator, ValidationReport, check_credential_format


logger = get_logger(__name__)


class DashboardCore:
    """
    Wires the exchange client, validator, codec and order manager together.

    One instance owns one rate window store, so every order submitted through
    it is counted against the same per-account windows, and one ticker cache.
    """

    def __init__(self, settings: Optional[AppSettings] = None,
                 codec: Optional[EncryptionCodec] = None,
                 trace: Optional[TraceHook] = None,
                 ticker_cache: Optional[InMemoryResponseCache] = None):
        self.settings = settings or AppSettings()
        self.trace = trace or LoggingTraceHook(get_logger('mexc_dashboard.trace'))
        self.codec = codec or EncryptionCodec.from_environment(
            self.settings.security.secret_env,
            salt=self.settings.security.kdf_salt
        )

        self.rate_store = InMemoryRateWindowStore()
        self.rate_gate = AccountRateGate(self.rate_store)
        self.ticker_cache = (ticker_cache if ticker_cache is not None
                             else InMemoryResponseCache(self.settings.api.ticker_cache_ttl_ms))
        self.order_manager = OrderManager(
            self.codec,
            self.rate_gate,
            settings=self.settings.trading,
            client_factory=self.create_client
        )

    @classmethod
    def from_config_file(cls, config_path: Optional[str] = None, **kwargs) -> 'DashboardCore':
        """
        Raises:
            ConfigValidationError: the configuration file is missing or invalid
        """
        manager = ConfigManager(config_path, enable_hot_reload=False)
        return cls(manager.get_settings(), **kwargs)

    def create_client(self, api_key: Optional[str] = None,
                      api_secret: Optional[str] = None) -> MexcAPIClient:
        api = self.settings.api
        return MexcAPIClient(
            api_key,
            api_secret,
            base_url=api.base_url,
            timeout=api.timeout,
            trace=self.trace,
            user_agent=api.user_agent
        )

    @log_execution_time()
    def validate_credentials(self, api_key: str, api_secret: str) -> ValidationReport:
        """
        Check a freshly supplied key/secret pair against the exchange.

        Malformed credentials are rejected before any network call.
        """
        report = check_credential_format(api_key, api_secret)
        if not report.is_valid:
            logger.warning("Credential format check failed", extra={
                'api_key': mask_api_key(api_key),
                'errors': report.errors,
            })
            return report

        with self.create_client(api_key, api_secret) as client:
            validator = CredentialValidator(client, self.settings.validation, trace=self.trace)
            return validator.validate()

    def place_order(self, account: ExchangeAccount, order: OrderRequest) -> ExchangeResult:
        return self.order_manager.place_order(account, order)

    def cancel_all_orders(self, account: ExchangeAccount, symbol: str,
                          side: Optional[Union[str, OrderSide]] = None) -> ExchangeResult:
        return self.order_manager.cancel_all_orders(account, symbol, side=side)

    def check_order_parameters(self, symbol: str, price: Optional[float] = None) -> OrderValidationResult:
        return self.order_manager.check_order_parameters(symbol, price=price)

    def get_ticker(self, symbol: str) -> ExchangeResult:
        """24h ticker for ``symbol``; successful responses are reused until the cache TTL runs out."""
        cached = self.ticker_cache.get(symbol)
        if cached is not None:
            return ExchangeResult.ok(cached)

        with self.create_client() as client:
            result = client.get_24hr_ticker(symbol)
        if result.success:
            self.ticker_cache.put(symbol, result.data)
        return result

    def encrypt(self, secret: str) -> str:
        return self.codec.encrypt(secret)

    def decrypt(self, envelope: str) -> ExchangeResult:
        """Decrypt a stored envelope; failures come back tagged ``ENCRYPTION``."""
        return self.codec.decrypt(envelope)


def main():
    """Console entry point."""
    from .config.cli import cli
    cli()


if __name__ == '__main__':
    main()
