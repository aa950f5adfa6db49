"""
Configuration and Feature Flags for opgate

Defaults for operation configuration and the bundled middleware, plus
feature flags for behaviour that operators may want to toggle without code
changes. Everything is read from environment variables at import time.

Usage:
    from opgate.config.settings import get_setting, is_enabled

    window_ms = get_setting('rate_limit_window_ms')
    if is_enabled('log_hook_failures'):
        logger.warning(...)

Environment Variables:
    OPGATE_DEFAULT_MAX_RETRIES=3         - Default max_retries metadata
    OPGATE_RATE_LIMIT_WINDOW_MS=60000    - Default rate limiter window
    OPGATE_RATE_LIMIT_LIMIT=10           - Default calls per window
    OPGATE_LOG_LEVEL=INFO                - Log level for the MCP server
    OPGATE_OPERATIONS_MODULE=pkg.ops     - Module whose register_operations(registry)
                                           populates the MCP server's registry
    OPGATE_LOG_HOOK_FAILURES=true/false  - Log swallowed hook exceptions
    OPGATE_WARN_DEPRECATED_CONTEXT=true/false - Warn on userId/isAdmin
"""

import os
from typing import Any, Dict


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            f"Environment variable {name} must be an integer, got '{raw}'"
        ) from None


SETTINGS: Dict[str, Any] = {
    'default_max_retries': _env_int('OPGATE_DEFAULT_MAX_RETRIES', 3),
    'rate_limit_window_ms': _env_int('OPGATE_RATE_LIMIT_WINDOW_MS', 60000),
    'rate_limit_limit': _env_int('OPGATE_RATE_LIMIT_LIMIT', 10),
    'log_level': os.getenv('OPGATE_LOG_LEVEL', 'INFO').upper(),
    'operations_module': os.getenv('OPGATE_OPERATIONS_MODULE', ''),
}

# Feature flags with environment variable overrides
FEATURE_FLAGS: Dict[str, bool] = {
    'log_hook_failures': _env_bool('OPGATE_LOG_HOOK_FAILURES', 'true'),
    'warn_deprecated_context': _env_bool('OPGATE_WARN_DEPRECATED_CONTEXT', 'true'),
}


def get_setting(name: str) -> Any:
    """
    Get a configuration value.

    Args:
        name: Setting name (e.g., 'rate_limit_window_ms')

    Returns:
        The configured value

    Raises:
        KeyError: If setting name is not recognized
    """
    if name not in SETTINGS:
        available = ', '.join(SETTINGS.keys())
        raise KeyError(
            f"Unknown setting: '{name}'. "
            f"Available settings: {available}"
        )

    return SETTINGS[name]


def is_enabled(flag: str) -> bool:
    """
    Check if a feature flag is enabled.

    Args:
        flag: Feature flag name (e.g., 'log_hook_failures')

    Returns:
        True if flag is enabled, False otherwise

    Raises:
        KeyError: If flag name is not recognized

    Example:
        >>> is_enabled('log_hook_failures')
        True  # Default

        >>> # After: export OPGATE_LOG_HOOK_FAILURES=false
        >>> is_enabled('log_hook_failures')
        False
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    return FEATURE_FLAGS[flag]


def get_all_flags() -> Dict[str, bool]:
    """Get all feature flags and their current state."""
    return FEATURE_FLAGS.copy()


def set_flag(flag: str, enabled: bool) -> None:
    """
    Programmatically set a feature flag (for testing only).

    Args:
        flag: Feature flag name
        enabled: True to enable, False to disable

    Warning:
        This is for testing only. In production, use environment variables.
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    FEATURE_FLAGS[flag] = enabled
