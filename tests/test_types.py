"""Tests for message and tool value objects."""

import pytest

from completion_bridge import (
    AssistantMessage,
    ProtocolViolation,
    Role,
    SystemMessage,
    ToolInvocation,
    ToolMessage,
    ToolSpecification,
    UserMessage,
    message_from_dict,
)


def create_access_request(portalName: str, reason: str, urgent: bool = False) -> str:
    """Create an access request for a portal."""
    return f"{portalName}: {reason}"


class TestMessages:
    def test_roles(self):
        assert SystemMessage("s").role is Role.SYSTEM
        assert UserMessage("u").role is Role.USER
        assert AssistantMessage("a").role is Role.ASSISTANT
        assert ToolMessage("id", "t").role is Role.TOOL

    def test_empty_assistant_message_is_rejected(self):
        with pytest.raises(ValueError):
            AssistantMessage("")
        with pytest.raises(ValueError):
            AssistantMessage(None, ())

    def test_assistant_with_only_tool_calls(self):
        inv = ToolInvocation("call_1", "x", "{}")

        msg = AssistantMessage("", [inv])

        assert msg.tool_invocations == (inv,)

    def test_messages_are_immutable(self):
        msg = UserMessage("hi")
        with pytest.raises(AttributeError):
            msg.content = "changed"

    def test_message_from_dict(self):
        assert message_from_dict({"role": "user", "content": "hi"}) == UserMessage("hi")
        assert message_from_dict({"role": "tool", "tool_call_id": "c", "content": "r"}) == ToolMessage("c", "r")

        msg = message_from_dict(
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [{"id": "c", "function": {"name": "n", "arguments": '{"a":1}'}}],
            }
        )
        assert msg.tool_invocations == (ToolInvocation("c", "n", '{"a":1}'),)

    @pytest.mark.parametrize("raw", [{"role": "function"}, {"content": "no role"}])
    def test_message_from_dict_unknown_role(self, raw):
        with pytest.raises(ProtocolViolation):
            message_from_dict(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            {"role": "assistant"},
            {"role": "assistant", "content": "", "tool_calls": []},
            {"role": "assistant", "content": None, "tool_calls": None},
        ],
    )
    def test_message_from_dict_empty_assistant(self, raw):
        with pytest.raises(ProtocolViolation) as exc_info:
            message_from_dict(raw)

        assert isinstance(exc_info.value.original_exc, ValueError)


class TestToolTypes:
    def test_from_function(self):
        spec = ToolSpecification.from_function(create_access_request)

        assert spec.name == "create_access_request"
        assert spec.description == "Create an access request for a portal."
        assert spec.parameters.properties == {
            "portalName": {"type": "string"},
            "reason": {"type": "string"},
            "urgent": {"type": "boolean"},
        }
        assert spec.parameters.required == ("portalName", "reason")

    def test_from_function_overrides(self):
        spec = ToolSpecification.from_function(
            create_access_request, name="createAccessRequest", description="Portal access"
        )

        assert spec.name == "createAccessRequest"
        assert spec.description == "Portal access"

    def test_from_openai(self):
        spec = ToolSpecification.from_openai(
            {
                "type": "function",
                "function": {
                    "name": "get_weather",
                    "parameters": {
                        "type": "object",
                        "properties": {"location": {"type": "string"}},
                        "required": ["location"],
                    },
                },
            }
        )

        assert spec.name == "get_weather"
        assert spec.description == ""
        assert spec.parameters.required == ("location",)

    def test_from_openai_without_parameters(self):
        spec = ToolSpecification.from_openai({"name": "ping", "description": "Ping"})

        assert spec.parameters is None
        assert spec.description == "Ping"

    def test_invocation_arguments(self):
        assert ToolInvocation("c", "n", '{"a": 1}').arguments() == {"a": 1}
        assert ToolInvocation("c", "n", "").arguments() == {}
        with pytest.raises(ValueError):
            ToolInvocation("c", "n", "[1]").arguments()
