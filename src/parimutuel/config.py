"""
Configuration module for the parimutuel ledger
Centralizes constants, market policies and logging settings with validation
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

ZERO_WINNER_POLICIES = frozenset(["retain", "refund"])
DUST_POLICIES = frozenset(["retain", "largest_stake"])


class ConfigError(Exception):
    """Configuration validation error"""
    pass


def _safe_int_env(name: str, default: int, min_val: int = None, max_val: int = None) -> int:
    """
    Safely parse integer environment variable with bounds.
    Falls back to default on invalid values.
    """
    logger_local = logging.getLogger(__name__)
    try:
        value = int(os.getenv(name, str(default)))
        if min_val is not None:
            value = max(min_val, value)
        if max_val is not None:
            value = min(max_val, value)
        return value
    except (ValueError, TypeError):
        logger_local.warning(f"Invalid {name}, using default {default}")
        return default


class Config:
    """
    Ledger configuration with:
    - Environment variable support
    - Safe defaults
    - Runtime overrides via get/set
    """

    # ========== Financial Settings ==========
    FINANCIAL = {
        'unit_decimals': 18,
        'currency_symbol': 'ETH',
        'display_precision': 6,
    }

    # ========== Market Rules ==========
    MARKET = {
        'min_options': 2,
        'zero_winner_policy': os.getenv('PARIMUTUEL_ZERO_WINNER_POLICY', 'retain'),
        'dust_policy': os.getenv('PARIMUTUEL_DUST_POLICY', 'retain'),
    }

    # ========== Memory Management ==========
    MEMORY = {
        'max_transaction_log': _safe_int_env('PARIMUTUEL_MAX_TRANSACTION_LOG', 10000, 100, 1000000),
    }

    # ========== Logging Settings ==========
    LOGGING = {
        'level': os.getenv('LOG_LEVEL', 'INFO'),
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'date_format': '%Y-%m-%d %H:%M:%S',
        'max_bytes': 5 * 1024 * 1024,
        'backup_count': 3,
        'json_logs': False,
    }

    @classmethod
    def get_files_config(cls) -> dict:
        """Get file configuration lazily so env changes are picked up"""
        return {
            'log_dir': Path(os.getenv(
                'PARIMUTUEL_LOG_DIR',
                str(Path.home() / '.parimutuel' / 'logs')
            )),
        }

    def __init__(self, validate: bool = True):
        """
        Initialize configuration

        Args:
            validate: Whether to validate configuration on init
        """
        self._lock = threading.RLock()
        self._files_config: Optional[dict] = None
        self._custom_settings: Dict[str, Dict[str, Any]] = {}

        if validate:
            self.validate()

    @property
    def FILES(self) -> dict:
        """Cached file configuration"""
        with self._lock:
            if self._files_config is None:
                self._files_config = self.get_files_config()
            return self._files_config

    def validate(self):
        """
        Validate configuration values

        Raises:
            ConfigError: If any setting is out of range or unknown
        """
        errors = []

        decimals = self.get('financial', 'unit_decimals')
        if not isinstance(decimals, int) or not 0 <= decimals <= 36:
            errors.append(f"unit_decimals must be an int in [0, 36], got {decimals!r}")

        min_options = self.get('market', 'min_options')
        if not isinstance(min_options, int) or min_options < 2:
            errors.append(f"min_options must be an int >= 2, got {min_options!r}")

        zero_policy = self.get('market', 'zero_winner_policy')
        if zero_policy not in ZERO_WINNER_POLICIES:
            errors.append(
                f"zero_winner_policy must be one of {sorted(ZERO_WINNER_POLICIES)}, got {zero_policy!r}"
            )

        dust_policy = self.get('market', 'dust_policy')
        if dust_policy not in DUST_POLICIES:
            errors.append(f"dust_policy must be one of {sorted(DUST_POLICIES)}, got {dust_policy!r}")

        level = str(self.get('logging', 'level', 'INFO')).upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"Invalid log level: {level}")

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            logging.getLogger(__name__).error(error_msg)
            raise ConfigError(error_msg)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get configuration value with support for custom settings

        Args:
            section: Configuration section name
            key: Configuration key
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            section_lower = section.lower()
            if key in self._custom_settings.get(section_lower, {}):
                return self._custom_settings[section_lower][key]

            section_dict = getattr(self, section.upper(), None)
            if isinstance(section_dict, dict):
                return section_dict.get(key, default)

        return default

    def set(self, section: str, key: str, value: Any):
        """
        Set a configuration override

        Args:
            section: Configuration section name
            key: Configuration key
            value: Value to set
        """
        with self._lock:
            self._custom_settings.setdefault(section.lower(), {})[key] = value

    def reset_overrides(self):
        """Drop all runtime overrides (used by tests)"""
        with self._lock:
            self._custom_settings.clear()

    def to_dict(self) -> dict:
        """Export entire configuration as dictionary"""
        with self._lock:
            custom_settings = {k: dict(v) for k, v in self._custom_settings.items()}

        return {
            'financial': dict(self.FINANCIAL),
            'market': dict(self.MARKET),
            'memory': dict(self.MEMORY),
            'logging': dict(self.LOGGING),
            'files': {k: str(v) for k, v in self.FILES.items()},
            'custom': custom_settings,
        }


# Global configuration instance.
#
# Keep this import side-effect free: validation and logging setup happen in
# the explicit startup path (see `parimutuel.__main__`).
config = Config(validate=False)
