"""Tests for recovering tool calls written into message content."""

import json

import pytest

from completion_bridge.codec import JsonCodec
from completion_bridge.fallback import (
    DEFAULT_MATCH_THRESHOLD,
    ToolCallExtractor,
    extract_tool_call,
)
from completion_bridge.types import ToolParameters, ToolSpecification


def _spec(name, properties, required=()):
    return ToolSpecification(
        name=name,
        description=f"{name} tool",
        parameters=ToolParameters(
            properties={p: {"type": "string"} for p in properties},
            required=tuple(required),
        ),
    )


ACCESS_REQUEST = _spec(
    "createAccessRequest", ["portalName", "reason"], ["portalName", "reason"]
)


@pytest.fixture
def extractor():
    """Extractor with predictable ids."""
    counter = iter(range(1000))
    return ToolCallExtractor(id_factory=lambda: f"call_{next(counter)}")


class TestDirectCallForm:
    """Content that spells out name and arguments."""

    def test_direct_call_is_extracted(self, extractor):
        content = '{"name":"createAccessRequest","arguments":{"portalName":"Jira","reason":"need access"}}'

        inv = extractor.extract(content, [ACCESS_REQUEST])

        assert inv is not None
        assert inv.name == "createAccessRequest"
        assert inv.arguments_json == '{"portalName":"Jira","reason":"need access"}'
        assert json.loads(inv.arguments_json) == {"portalName": "Jira", "reason": "need access"}
        assert inv.id == "call_0"

    def test_direct_call_does_not_need_registered_spec(self, extractor):
        inv = extractor.extract('{"name": "unknownTool", "arguments": {}}', [])

        assert inv is not None
        assert inv.name == "unknownTool"
        assert inv.arguments_json == "{}"

    def test_surrounding_whitespace_is_ignored(self, extractor):
        inv = extractor.extract('\n  {"name": "x", "arguments": {"a": 1}}  \n')

        assert inv is not None
        assert inv.arguments_json == '{"a":1}'

    def test_string_arguments_are_serialized_as_json_string(self, extractor):
        inv = extractor.extract('{"name": "x", "arguments": "{\\"a\\": 1}"}')

        assert inv is not None
        assert json.loads(inv.arguments_json) == '{"a": 1}'

    def test_fresh_ids_per_extraction(self):
        first = extract_tool_call('{"name": "x", "arguments": {}}')
        second = extract_tool_call('{"name": "x", "arguments": {}}')

        assert first.id.startswith("call_")
        assert first.id != second.id


class TestNestedContentForm:
    """Tool calls wrapped in a ``content`` key."""

    def test_nested_string_is_unwrapped(self, extractor):
        content = json.dumps({"content": '{"name":"x","arguments":{}}'})

        inv = extractor.extract(content, [])

        assert inv is not None
        assert inv.name == "x"
        assert inv.arguments_json == "{}"

    def test_nested_object_is_direct_call(self, extractor):
        content = json.dumps({"content": {"name": "y", "arguments": {"q": "v"}}})

        inv = extractor.extract(content, [])

        assert inv is not None
        assert inv.name == "y"
        assert json.loads(inv.arguments_json) == {"q": "v"}

    def test_three_levels_are_unwrapped(self, extractor):
        content = '{"name":"deep","arguments":{}}'
        for _ in range(3):
            content = json.dumps({"content": content})

        inv = extractor.extract(content)

        assert inv is not None
        assert inv.name == "deep"

    def test_nesting_beyond_cap_fails(self, extractor):
        content = '{"name":"deep","arguments":{}}'
        for _ in range(4):
            content = json.dumps({"content": content})

        assert extractor.extract(content) is None

    def test_depth_cap_is_configurable(self):
        content = json.dumps({"content": '{"name":"x","arguments":{}}'})

        assert ToolCallExtractor(max_depth=0).extract(content) is None
        assert ToolCallExtractor(max_depth=1).extract(content) is not None

    def test_nested_plain_text_fails(self, extractor):
        assert extractor.extract('{"content": "just words"}', [ACCESS_REQUEST]) is None

    def test_nested_object_without_call_falls_back_to_bare_arguments(self, extractor):
        spec = _spec("post", ["content", "title"], ["content"])

        inv = extractor.extract('{"content": {"body": 1}, "title": "t"}', [spec])

        assert inv is not None
        assert inv.name == "post"


class TestBareArgumentsForm:
    """Arguments without a tool name, matched by parameter names."""

    def test_matching_spec_is_selected(self, extractor):
        content = '{"portalName":"Jira","reason":"need access"}'

        inv = extractor.extract(content, [ACCESS_REQUEST])

        assert inv is not None
        assert inv.name == "createAccessRequest"
        assert json.loads(inv.arguments_json) == {"portalName": "Jira", "reason": "need access"}

    def test_missing_required_parameter_fails(self, extractor):
        assert extractor.extract('{"portalName":"Jira"}', [ACCESS_REQUEST]) is None

    def test_threshold_boundary(self, extractor):
        spec = _spec("five", ["a", "b", "c", "d", "e"])

        four_of_five = extractor.extract('{"a":1,"b":2,"c":3,"d":4}', [spec])
        three_of_five = extractor.extract('{"a":1,"b":2,"c":3}', [spec])

        assert DEFAULT_MATCH_THRESHOLD == 0.8
        assert four_of_five is not None
        assert three_of_five is None

    def test_threshold_is_overridable(self):
        spec = _spec("five", ["a", "b", "c", "d", "e"])
        lenient = ToolCallExtractor(match_threshold=0.5)

        assert lenient.extract('{"a":1,"b":2,"c":3}', [spec]) is not None

    def test_first_declared_spec_wins(self, extractor):
        first = _spec("first", ["city", "date"], ["city"])
        second = _spec("second", ["city", "date"], ["city", "date"])

        inv = extractor.extract('{"city":"Izmir","date":"today"}', [first, second])

        assert inv.name == "first"

    def test_spec_without_properties_never_matches(self, extractor):
        bare = ToolSpecification(name="ping")

        assert extractor.extract('{"anything": 1}', [bare]) is None
        assert extractor.matches({}, ToolSpecification(name="p", parameters=ToolParameters())) is False

    def test_no_specs_fails(self, extractor):
        assert extractor.extract('{"portalName":"Jira","reason":"x"}', None) is None


class TestNonToolContent:
    """Content that is not a tool call degrades silently."""

    @pytest.mark.parametrize(
        "content",
        [
            "Hello! How can I help?",
            "",
            "   ",
            None,
            "[1, 2, 3]",
            '"a string"',
            "42",
            "{not json",
            "[" * 100000 + "]" * 100000,
            '{"content": ' * 50000 + "1" + "}" * 50000,
        ],
    )
    def test_returns_none(self, extractor, content):
        assert extractor.extract(content, [ACCESS_REQUEST]) is None

    def test_custom_codec_is_used(self):
        codec = JsonCodec(separators=(", ", ": "))
        inv = ToolCallExtractor(codec=codec).extract('{"name":"x","arguments":{"a":1,"b":2}}')

        assert inv.arguments_json == '{"a": 1, "b": 2}'
