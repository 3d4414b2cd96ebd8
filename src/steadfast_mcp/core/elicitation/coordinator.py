"""Elicitation coordinator.

Fills gaps in a tool call's arguments by asking the client, racing the
prompt against a timeout so that a silent or incapable client can never
hang the invocation.

A ``None`` result means "could not collect": the caller must fall back to
its ordinary missing-parameter error instead of proceeding.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from steadfast_mcp.core.deadline import Deadline
from steadfast_mcp.core.elicitation.models import (
    ElicitAction,
    ElicitationRequest,
    PropertySpec,
    RequestedSchema,
)
from steadfast_mcp.core.elicitation.surfaces import PromptSurface
from steadfast_mcp.core.errors.elicitation import ElicitationUnsupportedError
from steadfast_mcp.core.observability import audit_log, get_metrics

logger = logging.getLogger(__name__)

SchemaLike = Union[RequestedSchema, Mapping[str, Any]]


def _is_missing(args: Mapping[str, Any], name: str) -> bool:
    value = args.get(name)
    return value is None or value == ""


def missing_required_fields(args: Mapping[str, Any], required: Sequence[str]) -> List[str]:
    """Required fields that are absent, None or the empty string (in order)."""
    return [name for name in required if _is_missing(args, name)]


def needs_elicitation(args: Mapping[str, Any], required: Sequence[str]) -> bool:
    return bool(missing_required_fields(args, required))


def merge_elicited_params(provided: Mapping[str, Any], elicited: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge elicited values into provided arguments.

    Provided values win; elicited values only fill keys that are missing
    (absent, None or "").
    """
    merged = dict(provided)
    for key, value in (elicited or {}).items():
        if _is_missing(merged, key):
            merged[key] = value
    return merged


def _property_specs(schema: SchemaLike) -> Mapping[str, Any]:
    """Property specs keyed by field name.

    Accepts a ``RequestedSchema``, a JSON-schema object
    (``{"properties": {...}, "required": [...]}``) or a flat
    ``name -> spec`` mapping.
    """
    if isinstance(schema, RequestedSchema):
        return schema.properties
    properties = schema.get("properties")
    if isinstance(properties, Mapping) and all(
        isinstance(spec, (Mapping, PropertySpec)) for spec in properties.values()
    ):
        return properties
    return schema


def build_request(
    schema: SchemaLike,
    missing: Sequence[str],
    message: Optional[str] = None,
) -> ElicitationRequest:
    """Build a prompt asking only for ``missing``, all marked required.

    Only the missing fields' specs are validated, so the schema may describe
    other parameters with types an elicitation prompt cannot carry. Fields
    the schema does not describe are requested as plain strings.

    Raises:
        pydantic.ValidationError: A missing field's spec is not a primitive
            elicitation property
    """
    specs = _property_specs(schema)
    properties: Dict[str, PropertySpec] = {}
    for name in missing:
        spec = specs.get(name)
        if spec is None:
            properties[name] = PropertySpec(type="string")
        elif isinstance(spec, PropertySpec):
            properties[name] = spec
        else:
            properties[name] = PropertySpec.model_validate(spec)
    return ElicitationRequest(
        message=message or f"Please provide the missing parameters: {', '.join(missing)}",
        requested_schema=RequestedSchema(properties=properties, required=list(missing)),
    )


async def collect(
    partial_args: Dict[str, Any],
    schema: SchemaLike,
    required_fields: Sequence[str],
    prompt_surface: PromptSurface,
    timeout: float,
    *,
    deadline: Optional[Deadline] = None,
    message: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Collect missing required arguments from the client.

    Args:
        partial_args: Arguments the caller supplied
        schema: Property specs for the tool's parameters
        required_fields: Names that must be present before the call proceeds
        prompt_surface: Client-facing surface used to ask
        timeout: Seconds to wait for the client's answer
        deadline: Outer-operation deadline; caps ``timeout``
        message: Prompt text; a generic one is generated when omitted

    Returns:
        ``partial_args`` itself when nothing is missing; a merged dict on a
        valid accept; None on decline, cancel, timeout, invalid content, a
        missing field whose spec cannot be elicited, or any surface failure.
    """
    missing = missing_required_fields(partial_args, required_fields)
    if not missing:
        return partial_args

    effective = deadline.cap(timeout) if deadline is not None else timeout
    if effective is not None and effective <= 0:
        logger.info("No time left to elicit %s", missing)
        _record("timeout", missing)
        return None

    try:
        request = build_request(schema, missing, message)
    except ValidationError as exc:
        logger.warning("Cannot elicit %s: %d invalid property specs", missing, exc.error_count())
        _record("invalid_schema", missing)
        return None
    schema_sent = request.requested_schema

    try:
        response = await asyncio.wait_for(prompt_surface.prompt(request), timeout=effective)
    except asyncio.TimeoutError:
        logger.info("Elicitation timed out after %.2fs waiting for %s", effective, missing)
        _record("timeout", missing)
        return None
    except ElicitationUnsupportedError:
        logger.debug("Prompt surface cannot elicit; skipping")
        _record("unsupported", missing)
        return None
    except Exception as exc:
        logger.warning("Elicitation failed: %s", type(exc).__name__)
        _record("error", missing)
        return None

    if response.action is not ElicitAction.ACCEPT:
        _record(response.action.value, missing)
        return None

    problems = response.content_problems(schema_sent)
    if problems:
        logger.info("Rejected elicited content: %s", "; ".join(problems))
        _record("invalid", missing)
        return None

    _record("accept", missing)
    return merge_elicited_params(partial_args, response.content)


def _record(outcome: str, missing: Sequence[str]) -> None:
    get_metrics().counter("elicitation.outcome", labels={"outcome": outcome})
    audit_log("elicitation", outcome=outcome, fields=list(missing))
