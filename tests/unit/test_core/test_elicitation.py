"""Tests for elicitation of missing tool arguments.

Verifies:
- Nothing missing returns the caller's dict unchanged (same object)
- Accept merges elicited values, explicit values win
- Decline, cancel, timeout, unsupported client and invalid content yield None
- SessionPromptSurface speaks the MCP session API
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from steadfast_mcp.core.deadline import Deadline
from steadfast_mcp.core.elicitation import (
    ElicitAction,
    ElicitationResponse,
    NullPromptSurface,
    PropertySpec,
    RequestedSchema,
    SessionPromptSurface,
    build_request,
    collect,
    merge_elicited_params,
    missing_required_fields,
    needs_elicitation,
)
from steadfast_mcp.core.errors import ElicitationUnsupportedError

SCHEMA = {
    "name": PropertySpec(type="string", title="Index name", min_length=2, max_length=128),
    "replicas": PropertySpec(type="integer", minimum=1, maximum=12),
    "tier": {"type": "string", "enum": ["free", "basic", "standard"]},
}


class ScriptedSurface:
    """Prompt surface returning a fixed answer and recording requests."""

    def __init__(self, response=None, raises=None, delay=0.0):
        self.response = response
        self.raises = raises
        self.delay = delay
        self.requests = []

    async def prompt(self, request):
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        return self.response


def accept(**content) -> ElicitationResponse:
    return ElicitationResponse(action=ElicitAction.ACCEPT, content=content)


class TestHelpers:
    """Tests for missing-field detection and merging."""

    def test_missing_fields_include_none_and_empty(self):
        args = {"name": "", "replicas": None, "tier": "free"}
        assert missing_required_fields(args, ["name", "replicas", "tier", "other"]) == [
            "name",
            "replicas",
            "other",
        ]

    def test_needs_elicitation(self):
        assert needs_elicitation({"name": "a"}, ["name"]) is False
        assert needs_elicitation({}, ["name"]) is True
        assert needs_elicitation({}, []) is False

    def test_merge_keeps_explicit_values(self):
        merged = merge_elicited_params({"name": "hotels", "tier": ""}, {"name": "motels", "tier": "free"})
        assert merged == {"name": "hotels", "tier": "free"}

    def test_merge_without_elicited(self):
        provided = {"a": 1}
        merged = merge_elicited_params(provided, None)
        assert merged == provided
        assert merged is not provided

    def test_build_request_only_asks_for_missing(self):
        request = build_request(SCHEMA, ["name", "unknown"])
        schema = request.requested_schema
        assert set(schema.properties) == {"name", "unknown"}
        assert schema.required == ["name", "unknown"]
        assert schema.properties["unknown"].type == "string"
        assert "name, unknown" in request.message


class TestModels:
    """Tests for schema models and constraint checks."""

    def test_aliases_round_trip(self):
        spec = PropertySpec.model_validate({"type": "string", "minLength": 3, "enumNames": ["A"]})
        assert spec.min_length == 3
        dumped = RequestedSchema(properties={"x": spec}).to_json_schema()
        assert dumped["properties"]["x"]["minLength"] == 3
        assert dumped["properties"]["x"]["enumNames"] == ["A"]
        assert "maxLength" not in dumped["properties"]["x"]

    def test_required_must_be_declared(self):
        with pytest.raises(ValidationError):
            RequestedSchema(properties={}, required=["name"])

    def test_subset(self):
        schema = RequestedSchema(properties={"a": PropertySpec(), "b": PropertySpec()})
        assert schema.subset(["b"]).required == ["b"]

    @pytest.mark.parametrize(
        "spec, value, ok",
        [
            (PropertySpec(type="string", min_length=2), "ab", True),
            (PropertySpec(type="string", min_length=2), "a", False),
            (PropertySpec(type="string", max_length=2), "abc", False),
            (PropertySpec(type="string"), 5, False),
            (PropertySpec(type="integer"), 3, True),
            (PropertySpec(type="integer"), 3.5, False),
            (PropertySpec(type="integer"), True, False),
            (PropertySpec(type="number", minimum=0, maximum=1), 0.5, True),
            (PropertySpec(type="number", minimum=0), -1, False),
            (PropertySpec(type="boolean"), False, True),
            (PropertySpec(type="boolean"), "yes", False),
            (PropertySpec(enum=["a", "b"]), "c", False),
        ],
    )
    def test_problems_with(self, spec, value, ok):
        assert (spec.problems_with("f", value) == []) is ok

    def test_content_problems_ignore_non_accept(self):
        schema = RequestedSchema(properties={"a": PropertySpec()}, required=["a"])
        assert ElicitationResponse(action=ElicitAction.DECLINE).content_problems(schema) == []


class TestCollect:
    """Tests for the collect coordinator."""

    @pytest.mark.asyncio
    async def test_nothing_missing_returns_same_object(self):
        args = {"name": "hotels", "replicas": 1}
        surface = ScriptedSurface(accept(name="x"))
        result = await collect(args, SCHEMA, ["name", "replicas"], surface, timeout=1.0)
        assert result is args
        assert surface.requests == []

    @pytest.mark.asyncio
    async def test_accept_merges(self):
        args = {"name": "hotels", "replicas": None}
        surface = ScriptedSurface(accept(replicas=3))
        result = await collect(args, SCHEMA, ["name", "replicas"], surface, timeout=1.0)
        assert result == {"name": "hotels", "replicas": 3}
        assert surface.requests[0].requested_schema.required == ["replicas"]

    @pytest.mark.asyncio
    async def test_explicit_values_win_over_elicited(self):
        surface = ScriptedSurface(accept(name="ignored", replicas=2))
        result = await collect({"name": "hotels"}, SCHEMA, ["name", "replicas"], surface, timeout=1.0)
        assert result == {"name": "hotels", "replicas": 2}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", [ElicitAction.DECLINE, ElicitAction.CANCEL])
    async def test_decline_and_cancel(self, action):
        surface = ScriptedSurface(ElicitationResponse(action=action))
        assert await collect({}, SCHEMA, ["name"], surface, timeout=1.0) is None

    @pytest.mark.asyncio
    async def test_timeout(self):
        surface = ScriptedSurface(accept(name="late"), delay=5.0)
        assert await collect({}, SCHEMA, ["name"], surface, timeout=0.05) is None

    @pytest.mark.asyncio
    async def test_expired_deadline_never_prompts(self):
        surface = ScriptedSurface(accept(name="hotels"))
        result = await collect({}, SCHEMA, ["name"], surface, timeout=30.0, deadline=Deadline.after(0))
        assert result is None
        assert surface.requests == []

    @pytest.mark.asyncio
    async def test_unsupported_client(self):
        surface = ScriptedSurface(raises=ElicitationUnsupportedError("no"))
        assert await collect({}, SCHEMA, ["name"], surface, timeout=1.0) is None

    @pytest.mark.asyncio
    async def test_surface_error_is_a_decline(self):
        surface = ScriptedSurface(raises=ConnectionError("transport closed"))
        assert await collect({}, SCHEMA, ["name"], surface, timeout=1.0) is None

    @pytest.mark.asyncio
    async def test_invalid_content_is_a_decline(self):
        surface = ScriptedSurface(accept(replicas=50))
        assert await collect({}, SCHEMA, ["replicas"], surface, timeout=1.0) is None

    @pytest.mark.asyncio
    async def test_accept_missing_required_is_a_decline(self):
        surface = ScriptedSurface(accept(tier="free"))
        assert await collect({}, SCHEMA, ["name", "tier"], surface, timeout=1.0) is None

    @pytest.mark.asyncio
    async def test_enum_from_mapping_schema(self):
        surface = ScriptedSurface(accept(tier="premium"))
        assert await collect({}, SCHEMA, ["tier"], surface, timeout=1.0) is None

    @pytest.mark.asyncio
    async def test_json_schema_object_is_accepted(self):
        schema = {
            "type": "object",
            "properties": {"name": {"type": "string", "minLength": 2}},
            "required": ["name"],
        }
        surface = ScriptedSurface(accept(name="hotels"))
        assert await collect({}, schema, ["name"], surface, timeout=1.0) == {"name": "hotels"}
        sent = surface.requests[0].requested_schema
        assert list(sent.properties) == ["name"]
        assert sent.properties["name"].min_length == 2

    @pytest.mark.asyncio
    async def test_unelicitable_type_on_other_field_is_ignored(self):
        schema = {"name": {"type": "string"}, "tags": {"type": "array"}}
        surface = ScriptedSurface(accept(name="hotels"))
        assert await collect({}, schema, ["name"], surface, timeout=1.0) == {"name": "hotels"}

    @pytest.mark.asyncio
    async def test_unelicitable_missing_field_returns_none(self):
        schema = {"name": {"type": "string"}, "tags": {"type": "array"}}
        surface = ScriptedSurface(accept(tags=["a"]))
        assert await collect({}, schema, ["tags"], surface, timeout=1.0) is None
        assert surface.requests == []

    @pytest.mark.asyncio
    async def test_null_surface_declines(self):
        assert await collect({}, SCHEMA, ["name"], NullPromptSurface(), timeout=1.0) is None


class FakeSession:
    """Minimal stand-in for an MCP ServerSession."""

    def __init__(self, capable=True, action="accept", content=None):
        self.capable = capable
        self.action = action
        self.content = content
        self.calls = []

    def check_client_capability(self, capability):
        return self.capable and capability.elicitation is not None

    async def elicit(self, message, requested_schema, /, related_request_id=None):
        self.calls.append(
            {"message": message, "schema": requested_schema, "related_request_id": related_request_id}
        )
        return SimpleNamespace(action=self.action, content=self.content)


class TestSessionPromptSurface:
    """Tests for the MCP session surface."""

    @pytest.mark.asyncio
    async def test_prompts_through_session(self):
        session = FakeSession(content={"name": "hotels"})
        result = await collect({}, SCHEMA, ["name"], SessionPromptSurface(session), timeout=1.0)
        assert result == {"name": "hotels"}
        sent = session.calls[0]["schema"]
        assert sent["type"] == "object"
        assert sent["required"] == ["name"]
        assert sent["properties"]["name"]["minLength"] == 2
        assert session.calls[0]["related_request_id"] is None

    @pytest.mark.asyncio
    async def test_context_target_passes_request_id(self):
        session = FakeSession(content={"name": "hotels"})
        ctx = SimpleNamespace(session=session, request_id="req-7")
        await SessionPromptSurface(ctx).prompt(build_request(SCHEMA, ["name"]))
        assert session.calls[0]["related_request_id"] == "req-7"

    @pytest.mark.asyncio
    async def test_incapable_client_raises(self):
        surface = SessionPromptSurface(FakeSession(capable=False))
        assert surface.supports_elicitation() is False
        with pytest.raises(ElicitationUnsupportedError):
            await surface.prompt(build_request(SCHEMA, ["name"]))

    @pytest.mark.asyncio
    async def test_decline_from_session(self):
        session = FakeSession(action="decline")
        assert await collect({}, SCHEMA, ["name"], SessionPromptSurface(session), timeout=1.0) is None
