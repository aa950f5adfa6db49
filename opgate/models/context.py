"""Caller-supplied execution context and per-call options.

ExecutionContext is a pydantic model so loosely-typed callers (dicts coming
off an MCP request or a model provider's tool call) are coerced into one
shape. The flat ``user_id`` / ``is_admin`` fields predate ``user`` and are
kept for backward compatibility only.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..utils.deprecation import warn_deprecated

logger = logging.getLogger(__name__)


class UserInfo(BaseModel):
    """Identity and role of the caller."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier for the user")
    role: str = Field(..., description="Role used for permission checks")


class ExecutionContext(BaseModel):
    """Context passed by reference through middleware, hooks and the body.

    Attributes:
        user: Caller identity (preferred over the flat fields)
        scope: Permission scopes granted to this execution
        user_id: DEPRECATED, use ``user.id``
        is_admin: DEPRECATED, use ``user.role == 'admin'``
        session_id: Session identifier for grouping related calls
        metadata: Free-form caller data
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user: Optional[UserInfo] = None
    scope: Optional[List[str]] = None
    user_id: Optional[str] = Field(None, alias="userId")
    is_admin: Optional[bool] = Field(None, alias="isAdmin")
    session_id: Optional[str] = Field(None, alias="sessionId")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _warn_deprecated_fields(self) -> "ExecutionContext":
        if self.user_id is not None:
            warn_deprecated(
                "userId",
                reason="flat user identifier",
                replacement="user.id",
                stacklevel=5,
            )
        if self.is_admin is not None:
            warn_deprecated(
                "isAdmin",
                reason="flat admin flag",
                replacement="user.role == 'admin'",
                stacklevel=5,
            )
        return self

    @property
    def role(self) -> Optional[str]:
        """Role of the caller, if a user is present."""
        return self.user.role if self.user else None

    @property
    def effective_user_id(self) -> Optional[str]:
        """``user.id``, falling back to the deprecated ``user_id``."""
        if self.user and self.user.id:
            return self.user.id
        return self.user_id


ContextLike = Union[ExecutionContext, Mapping[str, Any], None]


def coerce_context(context: ContextLike) -> ExecutionContext:
    """Return an ExecutionContext for ``context``.

    An existing ExecutionContext is returned as-is (same object), so the
    pipeline never copies or mutates what the caller passed in.

    Raises:
        pydantic.ValidationError: If a mapping does not fit the context model
        TypeError: If ``context`` is of any other type
    """
    if context is None:
        return ExecutionContext()
    if isinstance(context, ExecutionContext):
        return context
    if isinstance(context, Mapping):
        return ExecutionContext.model_validate(dict(context))
    raise TypeError(
        f"context must be an ExecutionContext, a mapping or None, "
        f"got {type(context).__name__}"
    )


@dataclass(frozen=True)
class ExecutionOptions:
    """Per-call switches for the policy gate.

    sudo bypasses the admin role check for HIGH risk operations.
    confirmed satisfies ``requires_confirmation``.
    """
    sudo: bool = False
    confirmed: bool = False

    @classmethod
    def coerce(
        cls,
        options: Union["ExecutionOptions", Mapping[str, Any], None]
    ) -> "ExecutionOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = set(options) - known
            if unknown:
                raise ValueError(
                    f"Unknown execution options: {sorted(unknown)}. "
                    f"Available options: {sorted(known)}"
                )
            return cls(**{k: options[k] is True for k in options})
        raise TypeError(
            f"options must be ExecutionOptions, a mapping or None, "
            f"got {type(options).__name__}"
        )
