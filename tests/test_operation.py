"""
Tests for Operation construction and end-to-end execution.
"""

from dataclasses import FrozenInstanceError
from typing import List

import pytest
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from opgate import (
    ConfirmationRequiredError,
    ExecutionContext,
    ExecutionOptions,
    ExecutionResult,
    LifecycleHooks,
    Operation,
    OperationConfig,
    OperationExecutionError,
    OperationValidationError,
    PolicyViolationError,
    RiskLevel,
    create_operation,
    operation,
)

from conftest import ADMIN, HIGH, USER, EchoArgs, Recorder


# ============================================================================
# Construction
# ============================================================================

class TestConstruction:

    def test_name_and_description_are_stripped(self, recorder):
        op = Operation("  echo  ", "  Echoes.  ", EchoArgs, recorder)

        assert op.name == "echo"
        assert op.description == "Echoes."
        assert op.schema is EchoArgs

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_name_rejected(self, name, recorder):
        with pytest.raises(ValueError, match="name is required"):
            Operation(name, "desc", EchoArgs, recorder)

    @pytest.mark.parametrize("description", ["", "\t\n"])
    def test_empty_description_rejected(self, description, recorder):
        with pytest.raises(ValueError, match="description is required"):
            Operation("echo", description, EchoArgs, recorder)

    def test_body_must_be_callable(self):
        with pytest.raises(TypeError):
            Operation("echo", "desc", EchoArgs, "not callable")

    def test_default_config(self, make_operation):
        config = make_operation().config

        assert config.risk_level == RiskLevel.LOW
        assert config.requires_confirmation is False
        assert config.timeout == 0
        assert config.retryable is True
        assert config.max_retries == 3
        assert config.tags == frozenset()
        assert config.hooks is None
        assert config.middleware == ()

    def test_overrides_merge_onto_defaults(self, make_operation):
        op = make_operation(config={"risk_level": "medium", "tags": ["billing"], "timeout": 30})

        assert op.config.risk_level == RiskLevel.MEDIUM
        assert op.config.tags == frozenset({"billing"})
        assert op.config.timeout == 30
        assert op.config.max_retries == 3

    def test_unknown_config_key_rejected(self, make_operation):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            make_operation(config={"risk": "HIGH"})

    @pytest.mark.asyncio
    async def test_hooks_mapping_is_coerced(self, make_operation):
        events = []
        op = make_operation(config={"hooks": {"on_start": lambda payload: events.append("start")}})

        assert isinstance(op.config.hooks, LifecycleHooks)

        result = await op.execute({"value": "hi"})

        assert result.success is True
        assert events == ["start"]

    def test_unknown_hook_name_rejected(self, make_operation):
        with pytest.raises(ValueError, match="Unknown hooks"):
            make_operation(config={"hooks": {"before": lambda payload: None}})

    @pytest.mark.parametrize("hooks", [["on_start"], "on_start", {"on_start": "not callable"}])
    def test_invalid_hooks_rejected(self, hooks, make_operation):
        with pytest.raises(TypeError):
            make_operation(config={"hooks": hooks})

    def test_single_string_tag_rejected(self, make_operation):
        with pytest.raises(TypeError, match="tags must be a collection"):
            make_operation(config={"tags": "database"})

    def test_config_instance_used_as_is(self, make_operation):
        config = OperationConfig(risk_level=RiskLevel.HIGH)
        assert make_operation(config=config).config is config

    def test_config_is_frozen(self, make_operation):
        op = make_operation()
        with pytest.raises(FrozenInstanceError):
            op.config.risk_level = RiskLevel.HIGH

    def test_create_operation_factory(self, recorder):
        op = create_operation("echo", "Echoes.", EchoArgs, recorder, {"risk_level": "HIGH"})

        assert isinstance(op, Operation)
        assert op.config.risk_level == RiskLevel.HIGH

    def test_decorator_uses_function_name_and_docstring(self):
        @operation(EchoArgs, config={"tags": ["demo"]})
        async def shout(args, context):
            """Upper-cases the input."""
            return args.value.upper()

        assert isinstance(shout, Operation)
        assert shout.name == "shout"
        assert shout.description == "Upper-cases the input."
        assert "demo" in shout.config.tags

    def test_decorator_without_description_fails(self):
        with pytest.raises(ValueError):
            @operation(EchoArgs)
            def undocumented(args, context):
                return None

    def test_repr_and_to_dict(self, make_operation):
        op = make_operation(config={"tags": ["b", "a"]})

        assert repr(op) == "Operation(echo)"
        assert op.to_dict() == {
            "name": "echo",
            "description": "Echoes the input.",
            "config": {
                "risk_level": "LOW",
                "requires_confirmation": False,
                "timeout": 0,
                "retryable": True,
                "max_retries": 3,
                "tags": ["a", "b"],
                "has_hooks": False,
                "middleware": [],
            },
        }


# ============================================================================
# Execution
# ============================================================================

class TestExecute:

    @pytest.mark.asyncio
    async def test_echo_end_to_end(self, make_operation):
        result = await make_operation().execute({"value": "hi"})

        assert isinstance(result, ExecutionResult)
        assert result.success is True
        assert result.data == {"value": "hi"}
        assert result.error is None
        assert result.metadata["operation_name"] == "echo"
        assert result.metadata["risk_level"] == "LOW"
        assert result.metadata["execution_time_ms"] >= 0

    @pytest.mark.asyncio
    async def test_body_receives_validated_model_and_context(self, recorder, make_operation):
        context = ExecutionContext.model_validate(USER)
        seen = []

        async def body(args, ctx):
            seen.append((args, ctx))
            return None

        await make_operation(body=body).execute({"value": "hi"}, context)

        args, ctx = seen[0]
        assert isinstance(args, EchoArgs)
        assert ctx is context

    @pytest.mark.asyncio
    async def test_sync_body_is_supported(self, make_operation):
        def body(args, context):
            return args.value * 2

        result = await make_operation(body=body).execute({"value": "ab"})

        assert result.data == "abab"

    @pytest.mark.asyncio
    async def test_none_output_is_success(self, make_operation):
        async def body(args, context):
            return None

        result = await make_operation(body=body).execute({"value": "x"})

        assert result.success is True
        assert result.data is None

    @pytest.mark.asyncio
    async def test_validate_without_executing(self, recorder, make_operation):
        op = make_operation(body=recorder)

        assert op.validate({"value": "ok"}).success is True
        assert op.validate({"value": 3}).success is False
        assert recorder.calls == []


class TestGates:

    @pytest.mark.asyncio
    async def test_invalid_args_raise_validation_error(self, recorder, make_operation):
        op = make_operation(body=recorder)

        with pytest.raises(OperationValidationError) as exc_info:
            await op.execute({"value": 123})

        error = exc_info.value
        assert error.operation_name == "echo"
        assert error.fields == ["value"]
        assert error.args_received == {"value": 123}
        assert error.code == "VALIDATION_ERROR"
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_high_risk_denied_for_regular_user(self, recorder, make_operation):
        op = make_operation(body=recorder, config=HIGH)

        with pytest.raises(PolicyViolationError) as exc_info:
            await op.execute({"value": "x"}, USER)

        assert exc_info.value.required_role == "admin"
        assert exc_info.value.actual_role == "user"
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_high_risk_without_context_denied(self, recorder, make_operation):
        with pytest.raises(PolicyViolationError):
            await make_operation(body=recorder, config=HIGH).execute({"value": "x"})
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_high_risk_allowed_for_admin(self, make_operation):
        result = await make_operation(config=HIGH).execute({"value": "x"}, ADMIN)

        assert result.success is True
        assert result.metadata["risk_level"] == "HIGH"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("options", [{"sudo": True}, ExecutionOptions(sudo=True)])
    async def test_sudo_overrides_role(self, options, make_operation):
        result = await make_operation(config=HIGH).execute({"value": "x"}, USER, options)
        assert result.success is True

    @pytest.mark.asyncio
    async def test_sudo_must_be_strictly_true(self, make_operation):
        with pytest.raises(PolicyViolationError):
            await make_operation(config=HIGH).execute({"value": "x"}, USER, {"sudo": "yes"})

    @pytest.mark.asyncio
    async def test_deprecated_is_admin_still_grants_access(self, make_operation):
        with pytest.warns(DeprecationWarning, match="isAdmin"):
            result = await make_operation(config=HIGH).execute({"value": "x"}, {"isAdmin": True})

        assert result.success is True

    @pytest.mark.asyncio
    async def test_confirmation_required(self, recorder, make_operation):
        op = make_operation(body=recorder, config={"requires_confirmation": True})

        with pytest.raises(ConfirmationRequiredError) as exc_info:
            await op.execute({"value": "x"})

        assert exc_info.value.pending_args == EchoArgs(value="x")
        assert recorder.calls == []

        result = await op.execute({"value": "x"}, options={"confirmed": True})
        assert result.success is True
        assert len(recorder.calls) == 1

    @pytest.mark.asyncio
    async def test_unknown_option_rejected(self, make_operation):
        with pytest.raises(ValueError, match="Unknown execution options"):
            await make_operation().execute({"value": "x"}, options={"force": True})


class TestBodyFailure:

    @pytest.mark.asyncio
    async def test_body_exception_is_wrapped(self, make_operation):
        cause = RuntimeError("database unavailable")
        op = make_operation(body=Recorder(error=cause))

        with pytest.raises(OperationExecutionError) as exc_info:
            await op.execute({"value": "x"})

        error = exc_info.value
        assert error.cause is cause
        assert error.__cause__ is cause
        assert error.execution_time_ms >= 0
        assert error.code == "EXECUTION_ERROR"
        assert str(error) == 'Execution failed for operation "echo": database unavailable'
        assert error.details["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_exception_without_message_uses_type_name(self, make_operation):
        op = make_operation(body=Recorder(error=KeyError()))

        with pytest.raises(OperationExecutionError, match="KeyError"):
            await op.execute({"value": "x"})


class TestContext:

    @pytest.mark.asyncio
    async def test_context_dict_is_coerced(self, make_operation):
        seen = []

        def body(args, context):
            seen.append(context)

        await make_operation(body=body).execute(
            {"value": "x"},
            {"user": {"id": "u1", "role": "user"}, "scope": ["read"], "sessionId": "s-1"},
        )

        context = seen[0]
        assert isinstance(context, ExecutionContext)
        assert context.user.id == "u1"
        assert context.scope == ["read"]
        assert context.session_id == "s-1"

    @pytest.mark.asyncio
    async def test_context_is_shared_by_reference(self, make_operation):
        context = ExecutionContext()

        async def tag(params):
            params.context.metadata["tagged"] = True
            return await params.next()

        def body(args, ctx):
            return ctx.metadata.get("tagged")

        result = await make_operation(body=body, config={"middleware": [tag]}).execute(
            {"value": "x"}, context,
        )

        assert result.data is True
        assert context.metadata == {"tagged": True}

    @pytest.mark.asyncio
    async def test_invalid_context_type(self, make_operation):
        with pytest.raises(TypeError):
            await make_operation().execute({"value": "x"}, "admin")

    @pytest.mark.asyncio
    async def test_malformed_context_mapping_raises_before_body(self, recorder, make_operation):
        op = make_operation(body=recorder)

        with pytest.raises(PydanticValidationError):
            await op.execute({"value": "x"}, {"user": {"id": "u1"}})

        assert recorder.calls == []


class Order(BaseModel):
    sku: str
    quantity: int
    notes: List[str] = []


@pytest.mark.asyncio
async def test_nested_validation_reports_every_field():
    async def place(args, context):
        return {"sku": args.sku}

    op = Operation("place_order", "Place an order.", Order, place)

    with pytest.raises(OperationValidationError) as exc_info:
        await op.execute({"quantity": "many", "notes": [1]})

    assert set(exc_info.value.fields) == {"sku", "quantity", "notes.0"}
