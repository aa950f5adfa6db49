"""
Policy gate: risk level and confirmation checks.

``evaluate_policy`` is a pure function of configuration, context, options
and the validated arguments. Its answer is one of three decision types:

    Allow              run the operation
    DenyRisk           HIGH risk without admin role, is_admin or sudo
    DenyConfirmation   requires_confirmation without confirmed=True

The role check runs first; confirmation is only considered once the role
check has passed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..models.config import OperationConfig, RiskLevel
from ..models.context import ExecutionContext, ExecutionOptions
from .errors import ConfirmationRequiredError, PolicyViolationError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Allow:
    operation_name: str
    risk_level: RiskLevel


@dataclass(frozen=True)
class DenyRisk:
    operation_name: str
    risk_level: RiskLevel
    required_role: str
    actual_role: Optional[str]
    args: Any = None


@dataclass(frozen=True)
class DenyConfirmation:
    operation_name: str
    risk_level: RiskLevel
    pending_args: Any = None


PolicyDecision = Union[Allow, DenyRisk, DenyConfirmation]


def has_admin_privileges(context: ExecutionContext, options: ExecutionOptions) -> bool:
    """Admin role, the deprecated is_admin flag, or a sudo override."""
    return (
        context.role == ADMIN_ROLE
        or context.is_admin is True
        or options.sudo is True
    )


def evaluate_policy(
    config: OperationConfig,
    context: ExecutionContext,
    options: ExecutionOptions,
    args: Any = None,
    operation_name: str = ""
) -> PolicyDecision:
    """
    Decide whether a call may proceed.

    Args:
        config: Operation configuration
        context: Caller context
        options: Per-call options (sudo, confirmed)
        args: Validated arguments, carried on denials
        operation_name: Name of the operation being gated

    Returns:
        Allow, DenyRisk or DenyConfirmation
    """
    if config.risk_level == RiskLevel.HIGH and not has_admin_privileges(context, options):
        return DenyRisk(
            operation_name=operation_name,
            risk_level=config.risk_level,
            required_role=ADMIN_ROLE,
            actual_role=context.role,
            args=args,
        )

    if config.requires_confirmation and options.confirmed is not True:
        return DenyConfirmation(
            operation_name=operation_name,
            risk_level=config.risk_level,
            pending_args=args,
        )

    return Allow(operation_name=operation_name, risk_level=config.risk_level)


def raise_for_decision(decision: PolicyDecision) -> None:
    """
    Raise the typed error for a denial; return silently for Allow.

    Raises:
        PolicyViolationError: For DenyRisk
        ConfirmationRequiredError: For DenyConfirmation
    """
    if isinstance(decision, Allow):
        return

    if isinstance(decision, DenyRisk):
        logger.info(
            f"Denied {decision.operation_name}: requires role "
            f"'{decision.required_role}', caller has '{decision.actual_role}'"
        )
        raise PolicyViolationError(
            decision.operation_name,
            required_role=decision.required_role,
            actual_role=decision.actual_role,
            risk_level=decision.risk_level,
            args=decision.args,
        )

    if isinstance(decision, DenyConfirmation):
        logger.info(f"Confirmation required for {decision.operation_name}")
        raise ConfirmationRequiredError(
            decision.operation_name,
            pending_args=decision.pending_args,
            risk_level=decision.risk_level,
        )

    raise TypeError(f"Unknown policy decision: {type(decision).__name__}")
