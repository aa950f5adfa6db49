"""Tests for the pydantic validator adapter."""

from typing import List, Optional

from pydantic import BaseModel, Field

from opgate.core.errors import ROOT_FIELD
from opgate.core.validation import SchemaValidator, format_location


class Address(BaseModel):
    city: str
    zip_code: str


class Customer(BaseModel):
    name: str = Field(..., min_length=1)
    age: int
    address: Address
    tags: List[str] = []
    nickname: Optional[str] = None


class TestSchemaValidator:
    """validate() never raises on malformed input."""

    def test_valid_input_returns_typed_data(self):
        validator = SchemaValidator(Customer)
        result = validator.validate({
            "name": "Ada",
            "age": "36",
            "address": {"city": "London", "zip_code": "N1"},
        })

        assert result.success is True
        assert isinstance(result.data, Customer)
        assert result.data.age == 36
        assert result.errors == []

    def test_nested_field_errors_use_dotted_paths(self):
        validator = SchemaValidator(Customer)
        result = validator.validate({
            "name": "Ada",
            "age": 36,
            "address": {"city": "London"},
        })

        assert result.success is False
        assert result.data is None
        assert any(err.startswith("address.zip_code: ") for err in result.errors)
        assert result.field_errors[0].field == "address.zip_code"
        assert result.field_errors[0].message == "Field required"

    def test_list_index_in_path(self):
        validator = SchemaValidator(Customer)
        result = validator.validate({
            "name": "Ada",
            "age": 36,
            "address": {"city": "London", "zip_code": "N1"},
            "tags": ["ok", 5],
        })

        assert result.success is False
        assert result.field_errors[0].field == "tags.1"

    def test_multiple_issues_are_all_reported(self):
        validator = SchemaValidator(Customer)
        result = validator.validate({"name": ""})

        fields = {fe.field for fe in result.field_errors}
        assert {"name", "age", "address"} <= fields
        assert len(result.errors) == len(result.field_errors)

    def test_root_issue_uses_bare_message_and_sentinel_field(self):
        validator = SchemaValidator(Customer)
        result = validator.validate("not a mapping")

        assert result.success is False
        assert len(result.errors) == 1
        assert ":" not in result.errors[0].split(" ")[0]
        assert result.field_errors[0].field == ROOT_FIELD

    def test_none_input_is_a_failure_not_an_exception(self):
        result = SchemaValidator(Customer).validate(None)
        assert result.success is False

    def test_plain_types_are_accepted(self):
        result = SchemaValidator(int).validate("12")
        assert result.success is True
        assert result.data == 12


class TestJsonSchema:
    """JSON schema is generated once, with nested refs inlined."""

    def test_nested_models_are_inlined(self):
        schema = SchemaValidator(Customer).json_schema()

        assert "$defs" not in schema
        address = schema["properties"]["address"]
        assert address["type"] == "object"
        assert set(address["properties"]) == {"city", "zip_code"}

    def test_returned_schema_is_a_copy(self):
        validator = SchemaValidator(Customer)
        first = validator.json_schema()
        first["properties"].clear()

        assert "name" in validator.json_schema()["properties"]


def test_format_location():
    assert format_location(("a", 0, "b")) == "a.0.b"
    assert format_location(()) == ""
