"""Shared fixtures for opgate tests."""

from typing import Any, Dict, List, Optional

import pytest
from pydantic import BaseModel

from opgate import Operation, RiskLevel
from opgate.config import settings
from opgate.registry import reset_operation_registry


class EchoArgs(BaseModel):
    value: str


class Recorder:
    """Records body invocations."""

    def __init__(self, result: Any = None, error: Optional[BaseException] = None):
        self.calls: List[Any] = []
        self.result = result
        self.error = error

    async def __call__(self, args, context):
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return {"value": args.value}


@pytest.fixture(autouse=True)
def clean_state():
    """Fresh registry singleton and default feature flags for every test."""
    flags = settings.get_all_flags()
    reset_operation_registry()
    yield
    reset_operation_registry()
    settings.FEATURE_FLAGS.update(flags)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_operation():
    """Build an echo-style operation with the given config overrides."""

    def _make(
        name: str = "echo",
        body: Any = None,
        config: Optional[Dict[str, Any]] = None,
        schema: Any = EchoArgs,
    ) -> Operation:
        async def echo(args, context):
            return {"value": args.value}

        return Operation(
            name=name,
            description="Echoes the input.",
            schema=schema,
            body=body or echo,
            config=config,
        )

    return _make


ADMIN = {"user": {"id": "admin_1", "role": "admin"}}
USER = {"user": {"id": "user_1", "role": "user"}}
HIGH = {"risk_level": RiskLevel.HIGH}
