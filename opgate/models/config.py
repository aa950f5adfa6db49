"""
Operation configuration.

Risk level, confirmation requirement and the recorded-only execution hints
(timeout, retries) for a single operation, plus its hooks and middleware.
Built once from defaults merged with caller overrides and frozen thereafter.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from ..config.settings import get_setting

if TYPE_CHECKING:
    from ..core.hooks import LifecycleHooks
    from ..core.pipeline import Middleware

logger = logging.getLogger(__name__)


class RiskLevel(str, Enum):
    """Coarse authorization tier of an operation."""
    LOW = "LOW"         # Read-only queries, calculations
    MEDIUM = "MEDIUM"   # Reversible state changes
    HIGH = "HIGH"       # Irreversible effects: deletes, payments, outbound mail

    @classmethod
    def coerce(cls, value: Union["RiskLevel", str]) -> "RiskLevel":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        available = ', '.join(level.value for level in cls)
        raise ValueError(
            f"Invalid risk level: {value!r}. Available levels: {available}"
        )


def _default_max_retries() -> int:
    return get_setting('default_max_retries')


def _coerce_hooks(hooks: Any) -> Optional["LifecycleHooks"]:
    """Accept LifecycleHooks, a mapping of hook names to callables, or None."""
    from ..core.hooks import LifecycleHooks

    if hooks is None or isinstance(hooks, LifecycleHooks):
        return hooks

    if not isinstance(hooks, Mapping):
        raise TypeError(
            f"hooks must be LifecycleHooks, a mapping or None, "
            f"got {type(hooks).__name__}"
        )

    known = {f.name for f in fields(LifecycleHooks)}
    unknown = set(hooks) - known
    if unknown:
        raise ValueError(
            f"Unknown hooks: {sorted(unknown)}. Available hooks: {sorted(known)}"
        )
    for name, hook in hooks.items():
        if hook is not None and not callable(hook):
            raise TypeError(f"Hook {name} must be callable, got {type(hook).__name__}")

    return LifecycleHooks(**hooks)


@dataclass(frozen=True)
class OperationConfig:
    """
    Configuration options for an operation.

    Attributes:
        risk_level: Authorization tier; HIGH requires admin or sudo
        requires_confirmation: Caller must pass ``confirmed=True``
        timeout: Seconds, 0 = unset (recorded, not enforced by the core)
        retryable: Retry intent (recorded, not enforced)
        max_retries: Retry budget (recorded, not enforced)
        tags: Searchable tags
        hooks: Lifecycle hooks fired around the operation body (a mapping
            of hook names to callables is accepted)
        middleware: Ordered interceptors, outermost first
    """
    risk_level: RiskLevel = RiskLevel.LOW
    requires_confirmation: bool = False
    timeout: float = 0
    retryable: bool = True
    max_retries: int = field(default_factory=_default_max_retries)
    tags: FrozenSet[str] = frozenset()
    hooks: Optional["LifecycleHooks"] = None
    middleware: Tuple["Middleware", ...] = ()

    def __post_init__(self):
        """Coerce loosely-typed overrides and check ranges."""
        object.__setattr__(self, 'risk_level', RiskLevel.coerce(self.risk_level))
        if isinstance(self.tags, str):
            raise TypeError(
                f"tags must be a collection of strings, got str '{self.tags}'; "
                f"use ['{self.tags}']"
            )
        object.__setattr__(self, 'tags', frozenset(self.tags or ()))
        object.__setattr__(self, 'hooks', _coerce_hooks(self.hooks))
        object.__setattr__(self, 'middleware', tuple(self.middleware or ()))

        if self.timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {self.timeout}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        for mw in self.middleware:
            if not callable(mw):
                raise TypeError(f"Middleware must be callable, got {type(mw).__name__}")

    @classmethod
    def from_overrides(
        cls,
        overrides: Union["OperationConfig", Mapping[str, Any], None] = None
    ) -> "OperationConfig":
        """
        Merge caller overrides onto the defaults.

        Args:
            overrides: An OperationConfig (used as-is), a mapping of field
                names to values, or None for all defaults

        Raises:
            ValueError: If the mapping names an unknown field
        """
        if overrides is None:
            return cls()
        if isinstance(overrides, cls):
            return overrides
        if isinstance(overrides, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = set(overrides) - known
            if unknown:
                raise ValueError(
                    f"Unknown configuration keys: {sorted(unknown)}. "
                    f"Available keys: {sorted(known)}"
                )
            return cls(**overrides)
        raise TypeError(
            f"config must be OperationConfig, a mapping or None, "
            f"got {type(overrides).__name__}"
        )

    def with_overrides(self, **overrides: Any) -> "OperationConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary (callables are reported by name)."""
        return {
            "risk_level": self.risk_level.value,
            "requires_confirmation": self.requires_confirmation,
            "timeout": self.timeout,
            "retryable": self.retryable,
            "max_retries": self.max_retries,
            "tags": sorted(self.tags),
            "has_hooks": self.hooks is not None,
            "middleware": [
                getattr(mw, "__name__", type(mw).__name__) for mw in self.middleware
            ],
        }
