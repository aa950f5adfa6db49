"""
Error taxonomy for operation execution.

Gate failures (validation, policy, confirmation) and body failures are
raised as typed exceptions. Middleware failures are not part of this
taxonomy: they are returned as ``ExecutionResult(success=False)``.

Hierarchy:
    OperationError
    ├── OperationValidationError   input does not match the schema
    ├── PolicyViolationError       HIGH risk without admin role or sudo
    ├── ConfirmationRequiredError  confirmation missing
    └── OperationExecutionError    the operation body raised
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

# Field name used for schema issues that are not tied to a field path
ROOT_FIELD = "_root"


@dataclass(frozen=True)
class FieldError:
    """A schema issue scoped to one field (dotted path)."""
    field: str
    message: str


class OperationError(Exception):
    """Base exception for operation execution errors."""

    code = "OPERATION_ERROR"

    def __init__(
        self,
        message: str,
        operation_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.operation_name = operation_name
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for logging or returning to a caller."""
        return {
            "code": self.code,
            "message": self.message,
            "operation_name": self.operation_name,
            "details": self.details,
        }


class OperationValidationError(OperationError):
    """Arguments failed schema validation."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        operation_name: str,
        field_errors: List[FieldError],
        args: Any = None
    ):
        super().__init__(
            f'Validation failed for operation "{operation_name}"',
            operation_name=operation_name,
            details={"args": args},
        )
        self.field_errors = list(field_errors)
        self.args_received = args

    @property
    def fields(self) -> List[str]:
        return [error.field for error in self.field_errors]

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field_errors"] = [asdict(error) for error in self.field_errors]
        return data


class PolicyViolationError(OperationError):
    """A HIGH risk operation was invoked without the required role."""

    code = "RISK_VIOLATION"

    def __init__(
        self,
        operation_name: str,
        required_role: str,
        actual_role: Optional[str],
        risk_level: Any = None,
        args: Any = None
    ):
        super().__init__(
            f'Operation "{operation_name}" requires role "{required_role}" '
            f'(current role: {actual_role or "none"}). '
            f'Pass sudo=True to override.',
            operation_name=operation_name,
            details={
                "required_role": required_role,
                "actual_role": actual_role,
                "risk_level": getattr(risk_level, "value", risk_level),
                "args": args,
            },
        )
        self.required_role = required_role
        self.actual_role = actual_role
        self.risk_level = risk_level
        self.args_received = args


class ConfirmationRequiredError(OperationError):
    """The operation requires explicit confirmation before it runs."""

    code = "CONFIRMATION_REQUIRED"

    def __init__(
        self,
        operation_name: str,
        pending_args: Any,
        risk_level: Any = None
    ):
        super().__init__(
            f'Operation "{operation_name}" requires confirmation. '
            f'Re-run with confirmed=True to proceed.',
            operation_name=operation_name,
            details={
                "pending_args": pending_args,
                "risk_level": getattr(risk_level, "value", risk_level),
            },
        )
        self.pending_args = pending_args
        self.risk_level = risk_level


class OperationExecutionError(OperationError):
    """The operation body raised. The original error is ``cause``."""

    code = "EXECUTION_ERROR"

    def __init__(
        self,
        operation_name: str,
        cause: BaseException,
        execution_time_ms: float,
        args: Any = None
    ):
        reason = str(cause) or type(cause).__name__
        super().__init__(
            f'Execution failed for operation "{operation_name}": {reason}',
            operation_name=operation_name,
            details={
                "execution_time_ms": execution_time_ms,
                "error_type": type(cause).__name__,
                "args": args,
            },
        )
        self.cause = cause
        self.execution_time_ms = execution_time_ms
        self.args_received = args
