"""Deprecation utilities for context fields and call styles."""

import logging
import warnings
from typing import Optional

from ..config.settings import is_enabled

logger = logging.getLogger(__name__)


def build_deprecation_message(
    name: str,
    reason: str,
    replacement: Optional[str] = None,
    removal_version: Optional[str] = None
) -> str:
    """Build the message used for deprecation warnings.

    Args:
        name: Deprecated field or callable name
        reason: Reason for deprecation
        replacement: Suggested replacement
        removal_version: Version when this will be removed

    Returns:
        Human-readable deprecation message
    """
    msg = f"'{name}' is deprecated: {reason}."

    if replacement:
        msg += f" Use '{replacement}' instead."

    if removal_version:
        msg += f" Will be removed in version {removal_version}."

    return msg


def warn_deprecated(
    name: str,
    reason: str,
    replacement: Optional[str] = None,
    removal_version: Optional[str] = None,
    stacklevel: int = 3
) -> None:
    """Log and emit a DeprecationWarning for a deprecated field.

    Controlled by the ``warn_deprecated_context`` feature flag.

    Example:
        warn_deprecated(
            "isAdmin",
            reason="flat admin flag",
            replacement="user.role == 'admin'",
        )
    """
    if not is_enabled('warn_deprecated_context'):
        return

    msg = build_deprecation_message(name, reason, replacement, removal_version)

    logger.warning(msg)

    # Also emit Python warning for visibility
    warnings.warn(msg, DeprecationWarning, stacklevel=stacklevel)
