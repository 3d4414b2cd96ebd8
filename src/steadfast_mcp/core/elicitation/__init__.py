"""Elicitation: collect missing tool arguments from the calling client."""

from steadfast_mcp.core.elicitation.coordinator import (
    build_request,
    collect,
    merge_elicited_params,
    missing_required_fields,
    needs_elicitation,
)
from steadfast_mcp.core.elicitation.models import (
    ElicitAction,
    ElicitationRequest,
    ElicitationResponse,
    PropertySpec,
    RequestedSchema,
)
from steadfast_mcp.core.elicitation.surfaces import (
    NullPromptSurface,
    PromptSurface,
    SessionPromptSurface,
)

__all__ = [
    # Coordinator
    "collect",
    "build_request",
    "merge_elicited_params",
    "missing_required_fields",
    "needs_elicitation",
    # Models
    "ElicitAction",
    "ElicitationRequest",
    "ElicitationResponse",
    "PropertySpec",
    "RequestedSchema",
    # Surfaces
    "PromptSurface",
    "NullPromptSurface",
    "SessionPromptSurface",
]
