"""Command-line interface for configuration and credential management."""

import sys
from typing import Optional

import click

from .manager import ConfigManager, ConfigValidationError
from ..logging import initialize_logging


DEFAULT_CONFIG_PATH = 'config/default.yaml'


@click.group()
@click.option('--log-dir', default=None, help='Write structured logs to this directory')
@click.option('--log-level', default='INFO', help='Minimum log level')
def cli(log_dir: Optional[str], log_level: str):
    """MEXC dashboard core commands."""
    if log_dir:
        initialize_logging(log_dir=log_dir, log_level=log_level, console_output=False)


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command()
@click.option('--config-path', '-c', default=DEFAULT_CONFIG_PATH, help='Path to configuration file')
def validate(config_path: str):
    """Validate a configuration file."""
    click.echo(f"Validating configuration: {config_path}")

    try:
        manager = ConfigManager(config_path, enable_hot_reload=False)
        settings = manager.get_settings()
    except ConfigValidationError as e:
        click.echo(click.style("✗ Configuration validation failed:", fg='red'))
        click.echo(f"  Error: {e.message}")
        if e.field_path:
            click.echo(f"  Field: {e.field_path}")
        if e.expected_type and e.actual_value is not None:
            click.echo(f"  Expected: {e.expected_type}, Got: {e.actual_value}")
        sys.exit(1)

    click.echo(click.style("✓ Configuration is valid", fg='green'))
    click.echo("\nConfiguration Summary:")
    click.echo(f"  API base URL: {settings.api.base_url}")
    click.echo(f"  Probe symbols: {', '.join(settings.validation.probe_symbols) or 'None'}")
    click.echo(f"  Minimum {settings.validation.reference_asset} balance: {settings.validation.min_notional:g}")
    click.echo(f"  Max orders per hour: {settings.trading.max_orders_per_hour}")
    click.echo(f"  Trading pairs: {', '.join(sorted(settings.trading.trading_pairs)) or 'None'}")


@cli.group()
def credentials():
    """API credential commands."""
    pass


def _load_core(config_path: str):
    from ..main import DashboardCore

    try:
        return DashboardCore.from_config_file(config_path)
    except ConfigValidationError as e:
        click.echo(click.style(f"✗ Configuration error: {e}", fg='red'))
        sys.exit(1)


@credentials.command(name='validate')
@click.option('--key', 'api_key', required=True, help='MEXC API key')
@click.option('--secret', 'api_secret', prompt=True, hide_input=True, help='MEXC API secret')
@click.option('--config-path', '-c', default=DEFAULT_CONFIG_PATH, help='Path to configuration file')
def validate_credentials(api_key: str, api_secret: str, config_path: str):
    """Validate an API key/secret pair against the exchange."""
    core = _load_core(config_path)
    report = core.validate_credentials(api_key, api_secret)

    if report.is_valid:
        click.echo(click.style("✓ Credentials are valid", fg='green'))
    else:
        click.echo(click.style("✗ Credentials are not valid", fg='red'))

    click.echo(f"  Account type: {report.account_type}")
    click.echo(f"  Permissions: {', '.join(report.permissions) or 'None'}")
    click.echo(f"  Can trade: {'Yes' if report.can_trade else 'No'}")
    click.echo(f"  Can withdraw: {'Yes' if report.can_withdraw else 'No'}")

    for balance in report.balances or []:
        click.echo(f"  Balance {balance.asset}: free {balance.free}, locked {balance.locked}")
    for error in report.errors:
        click.echo(click.style(f"  Error: {error}", fg='red'))
    for warning in report.warnings:
        click.echo(click.style(f"  ⚠ {warning}", fg='yellow'))

    if not report.is_valid:
        sys.exit(1)


@credentials.command()
@click.option('--secret', 'api_secret', prompt=True, hide_input=True, help='Secret to encrypt')
@click.option('--config-path', '-c', default=DEFAULT_CONFIG_PATH, help='Path to configuration file')
def encrypt(api_secret: str, config_path: str):
    """Encrypt a secret for storage."""
    core = _load_core(config_path)
    click.echo(core.encrypt(api_secret))


if __name__ == '__main__':
    cli()
