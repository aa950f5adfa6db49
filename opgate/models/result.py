"""The single result type returned by every pipeline stage."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ExecutionResult:
    """Result of an operation execution.

    Returned by the core executor on success and by middleware that
    short-circuits (rate limiting, timeouts, ...). Exactly one of ``data`` /
    ``error`` is meaningful, selected by ``success``.
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, data: Any, metadata: Optional[Dict[str, Any]] = None) -> "ExecutionResult":
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, metadata: Optional[Dict[str, Any]] = None) -> "ExecutionResult":
        return cls(success=False, error=error, metadata=metadata)

    def to_dict(self) -> Dict[str, Any]:
        """Export to dict, omitting fields that do not apply."""
        result: Dict[str, Any] = {"success": self.success}
        if self.success:
            result["data"] = self.data
        else:
            result["error"] = self.error
        if self.metadata is not None:
            result["metadata"] = self.metadata
        return result
