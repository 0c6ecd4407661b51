"""Configuration management with hot-reload functionality."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .settings import AppSettings

logger = logging.getLogger(__name__)


@dataclass
class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    message: str
    config_path: Optional[str] = None
    field_path: Optional[str] = None
    expected_type: Optional[str] = None
    actual_value: Optional[Any] = None

    def __str__(self) -> str:
        return self.message


def _type_name(expected_type) -> str:
    if isinstance(expected_type, tuple):
        return ' or '.join(t.__name__ for t in expected_type)
    return expected_type.__name__


class ConfigChangeHandler(FileSystemEventHandler):
    """Reloads the configuration when the watched YAML file changes."""

    def __init__(self, config_manager: 'ConfigManager'):
        self.config_manager = config_manager
        self.last_modified: Dict[str, float] = {}

    def on_modified(self, event):
        if event.is_directory:
            return

        file_path = event.src_path
        if not file_path.endswith(('.yaml', '.yml')):
            return

        # Debounce rapid file changes
        current_time = time.time()
        if current_time - self.last_modified.get(file_path, 0.0) < 1.0:
            return
        self.last_modified[file_path] = current_time

        self.config_manager._handle_config_change(file_path)


class ConfigManager:
    """Loads, validates and optionally hot-reloads the YAML configuration."""

    REQUIRED_SECTIONS = ['api', 'validation', 'trading', 'security']

    API_FIELDS = {
        'base_url': str,
        'timeout': (int, float),
    }
    VALIDATION_FIELDS = {
        'probe_symbols': list,
        'required_permissions': list,
        'reference_asset': str,
        'min_notional': (int, float),
    }
    TRADING_FIELDS = {
        'max_orders_per_hour': int,
        'default_symbol': str,
    }
    SECURITY_FIELDS = {
        'secret_env': str,
        'kdf_salt': str,
    }

    def __init__(self, config_path: Optional[str] = None, enable_hot_reload: bool = False):
        """
        Args:
            config_path: Path to the config file, ``config/default.yaml`` by default
            enable_hot_reload: Watch the config directory and reload on change
        """
        self.config_path = config_path or "config/default.yaml"
        self.enable_hot_reload = enable_hot_reload
        self._config: Dict[str, Any] = {}
        self._loaded = False
        self._change_callbacks: List[Callable[[Dict[str, Any]], None]] = []
        self._observer: Optional[Observer] = None

        if self.enable_hot_reload:
            self._setup_hot_reload()

    def _setup_hot_reload(self):
        config_dir = Path(self.config_path).parent
        if not config_dir.exists():
            logger.warning(f"Config directory not found, hot reload disabled: {config_dir}")
            self.enable_hot_reload = False
            return

        try:
            self._observer = Observer()
            self._observer.schedule(ConfigChangeHandler(self), str(config_dir), recursive=False)
            self._observer.start()
            logger.info("Hot reload enabled for configuration files")
        except OSError as e:
            logger.warning(f"Failed to setup hot reload: {e}")
            self._observer = None
            self.enable_hot_reload = False

    def _handle_config_change(self, file_path: str):
        if Path(file_path).name != Path(self.config_path).name:
            return

        logger.info(f"Configuration file changed: {file_path}")
        if self.reload_config():
            self._notify_change_callbacks(self._config)

    def add_change_callback(self, callback: Callable[[Dict[str, Any]], None]):
        """Register ``callback(new_config)`` to run after every successful reload."""
        self._change_callbacks.append(callback)

    def remove_change_callback(self, callback: Callable[[Dict[str, Any]], None]):
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)

    def _notify_change_callbacks(self, new_config: Dict[str, Any]):
        for callback in self._change_callbacks:
            try:
                callback(new_config.copy())
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

    def load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Args:
            config_path: Optional path to config file. Uses instance path if not provided.

        Returns:
            Dictionary containing loaded configuration

        Raises:
            ConfigValidationError: If config file is invalid or missing
        """
        path = config_path or self.config_path
        config_file = Path(path)

        if not config_file.exists():
            raise ConfigValidationError(
                f"Configuration file not found: {path}",
                config_path=path
            )

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                f"Invalid YAML syntax in {path}: {str(e)}",
                config_path=path
            )

        if config_data is None:
            raise ConfigValidationError(
                f"Configuration file is empty: {path}",
                config_path=path
            )

        if not isinstance(config_data, dict):
            raise ConfigValidationError(
                f"Configuration must be a dictionary, got {type(config_data).__name__}",
                config_path=path,
                expected_type="dict",
                actual_value=type(config_data).__name__
            )

        self._validate_config_structure(config_data, path)
        self._validate_section('api', config_data['api'], self.API_FIELDS, path)
        self._validate_section('validation', config_data['validation'], self.VALIDATION_FIELDS, path)
        self._validate_section('trading', config_data['trading'], self.TRADING_FIELDS, path)
        self._validate_section('security', config_data['security'], self.SECURITY_FIELDS, path)
        self._validate_ranges(config_data, path)

        self._config = config_data
        self._loaded = True

        logger.info(f"Successfully loaded configuration from {path}")
        return config_data.copy()

    def _validate_config_structure(self, config: Dict[str, Any], path: str) -> None:
        for section in self.REQUIRED_SECTIONS:
            if section not in config:
                raise ConfigValidationError(
                    f"Missing required configuration section '{section}' in {path}",
                    config_path=path,
                    field_path=section
                )

            if not isinstance(config[section], dict):
                raise ConfigValidationError(
                    f"Configuration section '{section}' must be a dictionary in {path}",
                    config_path=path,
                    field_path=section,
                    expected_type="dict",
                    actual_value=type(config[section]).__name__
                )

    def _validate_section(self, section: str, section_config: Dict[str, Any],
                          required_fields: Dict[str, Any], path: str) -> None:
        for field_name, expected_type in required_fields.items():
            if field_name not in section_config:
                raise ConfigValidationError(
                    f"Missing required {section} config field '{field_name}' in {path}",
                    config_path=path,
                    field_path=f"{section}.{field_name}"
                )

            value = section_config[field_name]
            # bool is an int subclass; reject it for numeric fields
            if isinstance(value, bool) or not isinstance(value, expected_type):
                raise ConfigValidationError(
                    f"{section.capitalize()} config field '{field_name}' must be of type "
                    f"{_type_name(expected_type)} in {path}",
                    config_path=path,
                    field_path=f"{section}.{field_name}",
                    expected_type=_type_name(expected_type),
                    actual_value=type(value).__name__
                )

    def _validate_ranges(self, config: Dict[str, Any], path: str) -> None:
        checks = [
            ('api.timeout', config['api']['timeout'], "a positive number"),
            ('validation.min_notional', config['validation']['min_notional'], "a positive number"),
            ('trading.max_orders_per_hour', config['trading']['max_orders_per_hour'], "a positive integer"),
        ]
        for field_path, value, expected in checks:
            if value <= 0:
                raise ConfigValidationError(
                    f"Config '{field_path}' must be {expected} in {path}",
                    config_path=path,
                    field_path=field_path,
                    expected_type=expected,
                    actual_value=value
                )

        ttl = config['api'].get('ticker_cache_ttl_ms', 0)
        if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl < 0:
            raise ConfigValidationError(
                f"Config 'api.ticker_cache_ttl_ms' must be a non-negative integer in {path}",
                config_path=path,
                field_path="api.ticker_cache_ttl_ms",
                expected_type="a non-negative integer",
                actual_value=ttl
            )

        pairs = config['trading'].get('trading_pairs', {})
        if not isinstance(pairs, dict):
            raise ConfigValidationError(
                f"Config 'trading.trading_pairs' must be a dictionary in {path}",
                config_path=path,
                field_path="trading.trading_pairs",
                expected_type="dict",
                actual_value=type(pairs).__name__
            )
        for name, pair in pairs.items():
            for required in ('symbol', 'min_quantity', 'min_notional'):
                if not isinstance(pair, dict) or required not in pair:
                    raise ConfigValidationError(
                        f"Trading pair '{name}' is missing '{required}' in {path}",
                        config_path=path,
                        field_path=f"trading.trading_pairs.{name}.{required}"
                    )

    def get_config(self) -> Dict[str, Any]:
        """Get current configuration. Loads if not already loaded."""
        if not self._loaded:
            self.load_config()
        return self._config.copy()

    def get_section(self, section: str) -> Dict[str, Any]:
        config = self.get_config()
        if section not in config:
            raise ConfigValidationError(f"Configuration section '{section}' not found")
        return config[section].copy()

    def get_settings(self) -> AppSettings:
        """Typed settings built from the current configuration."""
        return AppSettings.from_config(self.get_config())

    def validate_config_file(self, config_path: str) -> bool:
        """Validate a configuration file without replacing the loaded one."""
        try:
            ConfigManager(config_path, enable_hot_reload=False).load_config()
            return True
        except ConfigValidationError:
            return False

    def reload_config(self) -> bool:
        """Reload configuration, keeping the previous one when the new file is invalid."""
        try:
            self.load_config()
            return True
        except ConfigValidationError as e:
            logger.error(f"Failed to reload configuration: {e}")
            return False

    def stop_hot_reload(self):
        if self._observer and self._observer.is_alive():
            self._observer.stop()
            self._observer.join()
            logger.info("Hot reload stopped")
