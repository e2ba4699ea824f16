"""
Restricted schema validation for tool arguments.

This module validates JSON values against a small subset of JSON Schema:
``string``, ``number``, ``integer``, ``boolean`` and ``object`` nodes, with
``minimum``/``maximum`` bounds on numeric nodes and ``properties``/``required``
on object nodes. Validation is a single depth-first pass that stops at the
first violation.

Object nodes are lenient by default: keys present in the data but absent from
``properties`` are accepted. Passing ``strict=True`` reports them as
UNKNOWN_PROPERTY instead.

The module also provides builder helpers for the schema trees tools
advertise in ``tools/list``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

SUPPORTED_TYPES = ("string", "integer", "number", "boolean", "object")


class ValidationErrorKind(Enum):
    """Outcome categories of a validation run."""

    OK = "ok"
    TYPE_MISMATCH = "type_mismatch"
    MISSING_REQUIRED = "missing_required"
    INVALID_FORMAT = "invalid_format"
    OUT_OF_RANGE = "out_of_range"
    UNKNOWN_PROPERTY = "unknown_property"
    INVALID_SCHEMA = "invalid_schema"


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of a validation run.

    Attributes:
        kind: OK, or the category of the first violation found.
        message: Human-readable description of the violation.
        path: Dotted location of the violation (e.g., "root.pin").
    """

    kind: ValidationErrorKind = ValidationErrorKind.OK
    message: str = ""
    path: str = ""

    @property
    def ok(self) -> bool:
        """True if validation passed."""
        return self.kind is ValidationErrorKind.OK

    def to_dict(self) -> dict[str, str]:
        """Convert the result to a JSON-friendly dictionary."""
        return {"kind": self.kind.value, "message": self.message, "path": self.path}


VALID = ValidationResult()


def _fail(kind: ValidationErrorKind, message: str, path: str) -> ValidationResult:
    return ValidationResult(kind=kind, message=message, path=path)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a JSON number
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


# =============================================================================
# Validation
# =============================================================================


def validate(
    data: Any,
    schema: Any,
    *,
    path: str = "root",
    strict: bool = False,
) -> ValidationResult:
    """
    Validate a JSON value against a schema node.

    Args:
        data: Value to validate.
        schema: Schema node (a dict with at least a "type" key).
        path: Path reported for violations at this node.
        strict: Reject object keys not listed in "properties".

    Returns:
        ValidationResult; the first violation found, or OK.

    Example:
        >>> schema = {"type": "integer", "minimum": 0, "maximum": 100}
        >>> validate(101, schema).kind
        <ValidationErrorKind.OUT_OF_RANGE: 'out_of_range'>
    """
    if not isinstance(schema, dict):
        return _fail(ValidationErrorKind.INVALID_SCHEMA, "Schema node must be an object", path)

    expected_type = schema.get("type")
    if not isinstance(expected_type, str):
        return _fail(
            ValidationErrorKind.INVALID_SCHEMA, "Schema missing or invalid type", path
        )

    if expected_type == "string":
        if not isinstance(data, str):
            return _fail(ValidationErrorKind.TYPE_MISMATCH, "Expected string", path)
        return VALID

    if expected_type == "boolean":
        if not isinstance(data, bool):
            return _fail(ValidationErrorKind.TYPE_MISMATCH, "Expected boolean", path)
        return VALID

    if expected_type in ("integer", "number"):
        if expected_type == "integer" and not _is_integer(data):
            return _fail(ValidationErrorKind.TYPE_MISMATCH, "Expected integer", path)
        if not _is_number(data):
            return _fail(ValidationErrorKind.TYPE_MISMATCH, "Expected number", path)
        return _check_range(data, schema, path)

    if expected_type == "object":
        if not isinstance(data, dict):
            return _fail(ValidationErrorKind.TYPE_MISMATCH, "Expected object", path)
        return _validate_object(data, schema, path, strict)

    return _fail(
        ValidationErrorKind.INVALID_SCHEMA,
        f"Unsupported type in schema: {expected_type}",
        path,
    )


def _check_range(value: int | float, schema: dict[str, Any], path: str) -> ValidationResult:
    minimum = schema.get("minimum")
    maximum = schema.get("maximum")

    if _is_number(minimum) and value < minimum:
        return _fail(ValidationErrorKind.OUT_OF_RANGE, "Value below minimum", path)
    if _is_number(maximum) and value > maximum:
        return _fail(ValidationErrorKind.OUT_OF_RANGE, "Value above maximum", path)
    return VALID


def _validate_object(
    data: dict[str, Any],
    schema: dict[str, Any],
    path: str,
    strict: bool,
) -> ValidationResult:
    properties = schema.get("properties")
    required = schema.get("required")

    if properties is not None and not isinstance(properties, dict):
        return _fail(
            ValidationErrorKind.INVALID_SCHEMA, "'properties' must be an object", path
        )
    if required is not None and not isinstance(required, list):
        return _fail(ValidationErrorKind.INVALID_SCHEMA, "'required' must be an array", path)

    # Missing required keys are reported at the object's own path.
    for field_name in required or []:
        if isinstance(field_name, str) and field_name not in data:
            return _fail(
                ValidationErrorKind.MISSING_REQUIRED,
                f"Missing required field: {field_name}",
                path,
            )

    properties = properties or {}
    for key, value in data.items():
        property_schema = properties.get(key)
        child_path = f"{path}.{key}"
        if property_schema is None:
            if strict:
                return _fail(
                    ValidationErrorKind.UNKNOWN_PROPERTY,
                    f"Unknown property: {key}",
                    child_path,
                )
            continue

        result = validate(value, property_schema, path=child_path, strict=strict)
        if not result.ok:
            return result

    return VALID


def validate_tool_arguments(
    arguments: Any,
    input_schema: Any,
    *,
    strict: bool = False,
) -> ValidationResult:
    """
    Validate tool-call arguments against a tool's input schema.

    With no schema, anything (including no arguments) is accepted. With a
    schema but no arguments, an empty object is validated so required fields
    are still enforced.

    Args:
        arguments: The "arguments" value of a tools/call request, or None.
        input_schema: The tool's registered input schema, or None.
        strict: Reject argument keys not listed in the schema.

    Returns:
        ValidationResult for the arguments.
    """
    if input_schema is None:
        return VALID
    if arguments is None:
        arguments = {}
    return validate(arguments, input_schema, strict=strict)


# =============================================================================
# Schema Builders
# =============================================================================


def string_schema(description: str | None = None) -> dict[str, Any]:
    """Create a string schema node."""
    schema: dict[str, Any] = {"type": "string"}
    if description:
        schema["description"] = description
    return schema


def integer_schema(
    description: str | None = None,
    minimum: int | None = None,
    maximum: int | None = None,
) -> dict[str, Any]:
    """Create an integer schema node with optional inclusive bounds."""
    schema: dict[str, Any] = {"type": "integer"}
    if description:
        schema["description"] = description
    if minimum is not None:
        schema["minimum"] = minimum
    if maximum is not None:
        schema["maximum"] = maximum
    return schema


def number_schema(
    description: str | None = None,
    minimum: float | None = None,
    maximum: float | None = None,
) -> dict[str, Any]:
    """Create a number schema node with optional inclusive bounds."""
    schema: dict[str, Any] = {"type": "number"}
    if description:
        schema["description"] = description
    if minimum is not None:
        schema["minimum"] = minimum
    if maximum is not None:
        schema["maximum"] = maximum
    return schema


def boolean_schema(description: str | None = None) -> dict[str, Any]:
    """Create a boolean schema node."""
    schema: dict[str, Any] = {"type": "boolean"}
    if description:
        schema["description"] = description
    return schema


def object_schema(
    properties: dict[str, dict[str, Any]] | None = None,
    required: list[str] | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    """
    Create an object schema node.

    Args:
        properties: Mapping of property names to schema nodes.
        required: Names of required properties.
        description: Optional description.

    Returns:
        The schema node.
    """
    schema: dict[str, Any] = {"type": "object"}
    if description:
        schema["description"] = description
    if properties is not None:
        schema["properties"] = dict(properties)
    if required:
        schema["required"] = list(required)
    return schema


class SchemaBuilder:
    """
    Fluent builder for object schemas.

    Example:
        >>> schema = (
        ...     SchemaBuilder()
        ...     .add_integer("pin", "GPIO pin number", minimum=0, maximum=39, required=True)
        ...     .add_boolean("state", "Output level", required=True)
        ...     .build()
        ... )
        >>> schema["required"]
        ['pin', 'state']
    """

    def __init__(self, description: str | None = None) -> None:
        self._description = description
        self._properties: dict[str, dict[str, Any]] = {}
        self._required: list[str] = []

    def _add(self, name: str, node: dict[str, Any], required: bool) -> SchemaBuilder:
        if not name:
            raise ValueError("Property name is required")
        self._properties[name] = node
        if required and name not in self._required:
            self._required.append(name)
        return self

    def add_string(
        self, name: str, description: str | None = None, *, required: bool = False
    ) -> SchemaBuilder:
        """Add a string property."""
        return self._add(name, string_schema(description), required)

    def add_integer(
        self,
        name: str,
        description: str | None = None,
        *,
        minimum: int | None = None,
        maximum: int | None = None,
        required: bool = False,
    ) -> SchemaBuilder:
        """Add an integer property with optional bounds."""
        return self._add(name, integer_schema(description, minimum, maximum), required)

    def add_number(
        self,
        name: str,
        description: str | None = None,
        *,
        minimum: float | None = None,
        maximum: float | None = None,
        required: bool = False,
    ) -> SchemaBuilder:
        """Add a number property with optional bounds."""
        return self._add(name, number_schema(description, minimum, maximum), required)

    def add_boolean(
        self, name: str, description: str | None = None, *, required: bool = False
    ) -> SchemaBuilder:
        """Add a boolean property."""
        return self._add(name, boolean_schema(description), required)

    def build(self) -> dict[str, Any]:
        """Return the finished object schema (always with "properties")."""
        return object_schema(
            properties=self._properties,
            required=self._required,
            description=self._description,
        )
