"""
Structured Output Contract
==========================

Turns a JSON Schema object into a runtime Pydantic model and validates
the ``structured_output`` payload of a terminal result against it.

TYPE MAPPING
------------
    JSON Schema     →   Python Type
    "string"            str
    "number"            float
    "integer"           int
    "boolean"           bool
    "array"             list[<items>]
    "object"            nested model (when properties are declared) or dict
    enum: [...]         Literal[...]
    ["string", "null"]  Optional[str] (any list of types becomes a Union)
    no "type"           Any

REQUIRED vs OPTIONAL
--------------------
Fields listed in ``required`` get ``...`` (required); every other field
defaults to ``None``.

EXAMPLE
-------
    schema = {
        "type": "object",
        "properties": {
            "summary": {"type": "string"},
            "overallScore": {"type": "number"},
        },
        "required": ["summary", "overallScore"],
    }
    contract = OutputContract.from_schema(schema)
    contract.validate({"summary": "ok", "overallScore": 80})
"""

import re
from typing import Any, Literal, Optional, Union

from loguru import logger
from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    create_model,
)

from agentcookbook.exceptions import SchemaViolation

_SCALAR_TYPES: dict[str, Any] = {
    "string": StrictStr,
    "number": StrictFloat,
    "integer": StrictInt,
    "boolean": StrictBool,
}


def _model_name(path: str) -> str:
    parts = re.split(r"[^0-9a-zA-Z]+", path)
    return "".join(p[:1].upper() + p[1:] for p in parts if p) or "Output"


def _field_type(prop: dict[str, Any], path: str) -> Any:
    """Map one JSON Schema property to a Python annotation."""
    if "enum" in prop and prop["enum"]:
        return Literal[tuple(prop["enum"])]  # type: ignore[misc]

    json_type = prop.get("type")

    if isinstance(json_type, list):
        # ["string", "null"] and other type unions
        members = [t for t in json_type if t != "null"]
        if not members:
            return type(None)
        annotation = Union[tuple(_field_type({**prop, "type": t}, path) for t in members)]  # type: ignore[misc]
        return Optional[annotation] if "null" in json_type else annotation

    if json_type == "null":
        return type(None)

    if isinstance(json_type, str) and json_type in _SCALAR_TYPES:
        return _SCALAR_TYPES[json_type]

    if json_type == "array":
        items = prop.get("items")
        if isinstance(items, dict) and items:
            return list[_field_type(items, f"{path}_item")]  # type: ignore[misc]
        return list

    if json_type == "object":
        if prop.get("properties"):
            return build_model(prop, _model_name(path))
        return dict

    # No type (or an unknown one) accepts any value
    return Any


def build_model(schema: dict[str, Any], name: str = "AgentOutput") -> type[BaseModel]:
    """
    Dynamically create a Pydantic model from a JSON Schema object.

    Numeric fields are strict about type: a string where a number is
    declared fails validation instead of being coerced.

    Args:
        schema: JSON Schema with ``properties`` and optional ``required``
        name: Model class name

    Returns:
        Dynamically created Pydantic model class
    """
    properties: dict[str, Any] = schema.get("properties") or {}
    required: list[str] = schema.get("required") or []

    fields: dict[str, Any] = {}
    for field_name, prop in properties.items():
        field_type = _field_type(prop or {}, f"{name}_{field_name}")
        if field_name in required:
            fields[field_name] = (field_type, ...)
        else:
            fields[field_name] = (Optional[field_type], None)

    config = ConfigDict(extra="allow")
    return create_model(name, __config__=config, **fields)


class OutputContract:
    """A caller-declared structured output schema."""

    def __init__(self, schema: dict[str, Any], name: str = "AgentOutput") -> None:
        if schema.get("type", "object") != "object":
            raise ValueError(f"Output contract must describe an object, got {schema.get('type')!r}")
        self.schema = schema
        self.model = build_model(schema, name)

    @classmethod
    def from_schema(cls, schema: dict[str, Any], name: str = "AgentOutput") -> "OutputContract":
        return cls(schema, name)

    @property
    def required(self) -> list[str]:
        return list(self.schema.get("required") or [])

    def validate(self, payload: Any) -> dict[str, Any]:
        """Validate a payload against the contract.

        Returns:
            The payload itself, unchanged, once it satisfies the contract

        Raises:
            SchemaViolation: if the payload is missing, not an object, or
                breaks any field constraint
        """
        if payload is None:
            raise SchemaViolation([{"loc": (), "msg": "structured output missing", "type": "missing"}])
        if not isinstance(payload, dict):
            raise SchemaViolation([{
                "loc": (),
                "msg": f"expected an object, got {type(payload).__name__}",
                "type": "model_type",
            }])

        try:
            self.model.model_validate(payload)
        except ValidationError as e:
            details = [
                {"loc": tuple(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
            logger.debug(f"Structured output failed validation: {details}")
            raise SchemaViolation(details) from e

        return payload

    def to_output_format(self) -> dict[str, Any]:
        """Output format block forwarded to the agent service."""
        return {"type": "json_schema", "schema": self.schema}

