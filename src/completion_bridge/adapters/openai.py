"""OpenAI-compatible chat-completions adapter: pure request/response transformations."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from completion_bridge._exceptions import ProtocolViolation
from completion_bridge.codec import DEFAULT_CODEC, JsonCodec
from completion_bridge.fallback import ToolCallExtractor
from completion_bridge.response import (
    GenerationResult,
    TextResult,
    TokenUsage,
    ToolCallsResult,
)
from completion_bridge.types import (
    AssistantMessage,
    ChatMessage,
    ConversationMessage,
    GenerationParams,
    SystemMessage,
    ToolInvocation,
    ToolMessage,
    ToolSpecification,
    UserMessage,
    message_from_dict,
)

logger = logging.getLogger(__name__)

MessageLike = Union[ConversationMessage, ChatMessage]


class ChatCompletionsAdapter:
    """Adapter for converting between the generic agent protocol and the chat-completions wire format."""

    def __init__(
        self,
        *,
        codec: JsonCodec = DEFAULT_CODEC,
        extractor: Optional[ToolCallExtractor] = None,
    ) -> None:
        self.codec = codec
        self.extractor = extractor or ToolCallExtractor(codec=codec)

    # --- request side ------------------------------------------------------
    def build_message(self, msg: MessageLike) -> dict[str, Any]:
        """Convert one conversation message to its wire dict."""
        if isinstance(msg, Mapping):
            msg = message_from_dict(msg)

        if isinstance(msg, UserMessage):
            return {"role": "user", "content": msg.content}
        if isinstance(msg, SystemMessage):
            return {"role": "system", "content": msg.content}
        if isinstance(msg, AssistantMessage):
            if msg.tool_invocations:
                return {
                    "role": "assistant",
                    # wire format wants null, not "", next to tool calls
                    "content": msg.content or None,
                    "tool_calls": [
                        {
                            "id": inv.id,
                            "type": "function",
                            "function": {"name": inv.name, "arguments": inv.arguments_json},
                        }
                        for inv in msg.tool_invocations
                    ],
                }
            return {"role": "assistant", "content": msg.content}
        if isinstance(msg, ToolMessage):
            return {"role": "tool", "tool_call_id": msg.tool_call_id, "content": msg.content}

        raise ProtocolViolation(f"Unsupported message type: {type(msg).__name__}")

    def build_messages(self, messages: Sequence[MessageLike]) -> list[dict[str, Any]]:
        return [self.build_message(m) for m in messages]

    def build_tool(self, spec: ToolSpecification) -> dict[str, Any]:
        """Serialize a tool spec; parameterless tools still get a well-formed schema."""
        params = spec.parameters
        return {
            "type": "function",
            "function": {
                "name": spec.name,
                "description": spec.description or "",
                "parameters": {
                    "type": (params.type if params else None) or "object",
                    "properties": dict(params.properties) if params else {},
                    "required": list(params.required) if params else [],
                },
            },
        }

    def build_tools(self, specs: Optional[Sequence[ToolSpecification]]) -> list[dict[str, Any]]:
        return [self.build_tool(s) for s in specs or ()]

    def to_provider(
        self,
        messages: Sequence[MessageLike],
        params: GenerationParams,
        *,
        model: str,
        tools: Optional[Sequence[ToolSpecification]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Build the complete wire request body."""
        request: dict[str, Any] = {
            "model": model,
            "messages": self.build_messages(messages),
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "top_p": params.top_p,
            "frequency_penalty": params.frequency_penalty,
            "presence_penalty": params.presence_penalty,
            "seed": params.seed,
        }
        if tools:
            request["tools"] = self.build_tools(tools)
        if metadata:
            request["metadata"] = dict(metadata)

        for k, v in params.extra.items():
            request.setdefault(k, v)
        return request

    # --- response side -----------------------------------------------------
    def from_provider(
        self,
        raw: Any,
        tools: Optional[Sequence[ToolSpecification]] = None,
    ) -> GenerationResult:
        """
        Reconcile a parsed completion response into a GenerationResult.

        Structured ``tool_calls`` always win over text. Without them, the
        text is checked for a tool call written out as JSON before being
        returned as plain text.

        Raises:
            ProtocolViolation: no choices, no message, or neither content
                nor tool calls.
        """
        if not isinstance(raw, dict):
            raise ProtocolViolation(f"Expected a JSON object, got {type(raw).__name__}")

        choices = raw.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ProtocolViolation("Response has no choices")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise ProtocolViolation("Response choice has no message")

        usage = TokenUsage.from_wire(raw)

        tool_calls = message.get("tool_calls")
        if tool_calls:
            invocations = tuple(self._structured_invocation(tc) for tc in tool_calls)
            logger.info("Model returned %d tool call(s)", len(invocations))
            return ToolCallsResult(invocations=invocations, usage=usage)

        content = message.get("content")
        if content is not None:
            if not isinstance(content, str):
                raise ProtocolViolation(f"Message content is not text: {type(content).__name__}")
            recovered = self.extractor.extract(content, tools)
            if recovered is not None:
                logger.info("Recovered tool call %s from message content", recovered.name)
                return ToolCallsResult(invocations=(recovered,), usage=usage)
            return TextResult(content=content, usage=usage)

        raise ProtocolViolation("Response message has neither content nor tool calls")

    def _structured_invocation(self, tc: Any) -> ToolInvocation:
        fn = tc.get("function") if isinstance(tc, dict) else None
        if not isinstance(fn, dict) or not fn.get("name"):
            raise ProtocolViolation(f"Malformed tool call entry: {tc!r}")

        arguments = fn.get("arguments")
        if arguments is None:
            arguments = ""
        elif not isinstance(arguments, str):
            # some servers send an object instead of JSON text
            arguments = self.codec.dumps(arguments)

        return ToolInvocation(
            id=tc.get("id") or self.extractor.id_factory(),
            name=fn["name"],
            arguments_json=arguments,
        )

    # --- history helpers ---------------------------------------------------
    def assistant_message_from(self, result: GenerationResult) -> Optional[AssistantMessage]:
        """
        Assistant turn to append to the history for a generation result.

        Returns None for an empty text reply, which has nothing to append.
        """
        return result.to_message()

    def tool_result_message(self, invocation: ToolInvocation, content: Any) -> ToolMessage:
        """Tool turn answering ``invocation``; non-text results are JSON-encoded."""
        return ToolMessage(
            tool_call_id=invocation.id,
            content=content if isinstance(content, str) else self.codec.dumps(content),
        )
