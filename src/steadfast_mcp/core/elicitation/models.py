"""Elicitation request/response models.

The schema subset mirrors what MCP clients accept for ``elicitation/create``:
a flat object whose properties are primitive types with optional
constraints.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PropertyType = Literal["string", "number", "integer", "boolean"]


class ElicitAction(str, Enum):
    """How the client answered an elicitation prompt."""

    ACCEPT = "accept"
    DECLINE = "decline"
    CANCEL = "cancel"


class PropertySpec(BaseModel):
    """JSON-schema description of one elicited field."""

    model_config = ConfigDict(populate_by_name=True)

    type: PropertyType = Field("string", description="Primitive JSON type")
    title: Optional[str] = Field(None, description="Short label shown to the user")
    description: Optional[str] = Field(None, description="Longer help text")
    enum: Optional[List[Any]] = Field(None, description="Allowed values")
    enum_names: Optional[List[str]] = Field(None, alias="enumNames", description="Display names for enum")
    minimum: Optional[float] = Field(None, description="Inclusive numeric lower bound")
    maximum: Optional[float] = Field(None, description="Inclusive numeric upper bound")
    min_length: Optional[int] = Field(None, alias="minLength", ge=0, description="Minimum string length")
    max_length: Optional[int] = Field(None, alias="maxLength", ge=0, description="Maximum string length")
    default: Optional[Any] = Field(None, description="Suggested value")

    def problems_with(self, name: str, value: Any) -> List[str]:
        """Return the constraint violations of ``value`` (empty when valid)."""
        problems: List[str] = []
        if self.type == "string":
            if not isinstance(value, str):
                return [f"{name}: expected string, got {type(value).__name__}"]
            if self.min_length is not None and len(value) < self.min_length:
                problems.append(f"{name}: shorter than {self.min_length} characters")
            if self.max_length is not None and len(value) > self.max_length:
                problems.append(f"{name}: longer than {self.max_length} characters")
        elif self.type == "boolean":
            if not isinstance(value, bool):
                return [f"{name}: expected boolean, got {type(value).__name__}"]
        else:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return [f"{name}: expected {self.type}, got {type(value).__name__}"]
            if self.type == "integer" and not float(value).is_integer():
                return [f"{name}: expected integer, got {value!r}"]
            if self.minimum is not None and value < self.minimum:
                problems.append(f"{name}: below minimum {self.minimum:g}")
            if self.maximum is not None and value > self.maximum:
                problems.append(f"{name}: above maximum {self.maximum:g}")
        if self.enum is not None and value not in self.enum:
            problems.append(f"{name}: not one of {self.enum}")
        return problems


class RequestedSchema(BaseModel):
    """Flat object schema sent with an elicitation prompt."""

    type: Literal["object"] = "object"
    properties: Dict[str, PropertySpec] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_are_declared(self) -> "RequestedSchema":
        undeclared = [name for name in self.required if name not in self.properties]
        if undeclared:
            raise ValueError(f"required fields missing from properties: {undeclared}")
        return self

    def subset(self, names: List[str]) -> "RequestedSchema":
        """Schema limited to ``names``, all of them required."""
        return RequestedSchema(
            properties={name: self.properties[name] for name in names},
            required=list(names),
        )

    def to_json_schema(self) -> Dict[str, Any]:
        """Render with JSON-schema key names (``minLength`` etc.)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ElicitationRequest(BaseModel):
    """Prompt sent to the client asking for missing parameters."""

    message: str = Field(..., description="Human-readable explanation of what is needed")
    requested_schema: RequestedSchema = Field(..., alias="requestedSchema")

    model_config = ConfigDict(populate_by_name=True)


class ElicitationResponse(BaseModel):
    """Client answer to an elicitation prompt."""

    action: ElicitAction
    content: Optional[Dict[str, Any]] = None

    def content_problems(self, schema: RequestedSchema) -> List[str]:
        """Validate accepted content against ``schema``.

        An accept lacking a required key, or holding a value that violates
        its property constraints, has problems and must be treated as a
        decline.
        """
        if self.action is not ElicitAction.ACCEPT:
            return []
        content = self.content or {}
        problems = [
            f"{name}: required but not provided"
            for name in schema.required
            if content.get(name) is None or content.get(name) == ""
        ]
        for name, value in content.items():
            spec = schema.properties.get(name)
            if spec is None or value is None:
                continue
            problems.extend(spec.problems_with(name, value))
        return problems
