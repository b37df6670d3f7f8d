"""Conversation message variants and generation parameters."""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from enum import StrEnum
from typing import Any, ClassVar, Mapping, Optional, Union

from completion_bridge._exceptions import ProtocolViolation
from completion_bridge.types.tool import ToolInvocation


class Role(StrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True, slots=True)
class SystemMessage:
    content: str
    role: ClassVar[Role] = Role.SYSTEM


@dataclass(frozen=True, slots=True)
class UserMessage:
    content: str
    role: ClassVar[Role] = Role.USER


@dataclass(frozen=True, slots=True)
class AssistantMessage:
    """
    An assistant turn. Either ``content`` or ``tool_invocations`` must be
    non-empty; content may be empty (or None) when only tool calls are present.
    """

    content: Optional[str] = ""
    tool_invocations: tuple[ToolInvocation, ...] = ()
    role: ClassVar[Role] = Role.ASSISTANT

    def __post_init__(self) -> None:
        object.__setattr__(self, "tool_invocations", tuple(self.tool_invocations))
        if not self.content and not self.tool_invocations:
            raise ValueError("Assistant message needs content or tool invocations")


@dataclass(frozen=True, slots=True)
class ToolMessage:
    """The result of running a tool, answering the invocation with ``tool_call_id``."""

    tool_call_id: str
    content: str
    role: ClassVar[Role] = Role.TOOL


ConversationMessage = Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage]

# Plain-dict message shape accepted at the edges
ChatMessage = dict[str, Any]


def message_from_dict(msg: Mapping[str, Any]) -> ConversationMessage:
    """
    Convert a plain ``{"role": ..., ...}`` dict into its message variant.

    Raises:
        ProtocolViolation: if the role is missing or unknown, or an assistant
            dict has neither content nor tool calls.
    """
    role = msg.get("role")
    if role == Role.USER:
        return UserMessage(content=msg.get("content") or "")
    if role == Role.SYSTEM:
        return SystemMessage(content=msg.get("content") or "")
    if role == Role.TOOL:
        return ToolMessage(
            tool_call_id=msg.get("tool_call_id") or "",
            content=msg.get("content") or "",
        )
    if role == Role.ASSISTANT:
        invocations = []
        for tc in msg.get("tool_calls") or ():
            fn = tc.get("function") or {}
            invocations.append(
                ToolInvocation(
                    id=tc.get("id") or "",
                    name=fn.get("name") or "",
                    arguments_json=fn.get("arguments") or "",
                )
            )
        try:
            return AssistantMessage(
                content=msg.get("content"), tool_invocations=tuple(invocations)
            )
        except ValueError as exc:
            raise ProtocolViolation(str(exc), exc) from exc
    raise ProtocolViolation(f"Unsupported message role: {role!r}")


@dataclass
class GenerationParams:
    """Sampling parameters sent with every completion request."""

    temperature: float = 0.1
    max_tokens: int = 1500
    top_p: float = 0.9
    frequency_penalty: float = 0.5
    presence_penalty: float = 0.3
    seed: int = -1

    # Provider-specific parameters, forwarded unchanged
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self, exclude_none: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary, optionally excluding None values.

        Args:
            exclude_none: If True, exclude fields with None values

        Returns:
            Dictionary representation of the params
        """
        result = asdict(self)
        if exclude_none:
            return {k: v for k, v in result.items() if v is not None}
        return result

    def copy(self, **kwargs: Any) -> "GenerationParams":
        """
        Create a copy of this GenerationParams with optional overrides.

        Args:
            **kwargs: Field values to override

        Returns:
            New GenerationParams instance with overrides applied
        """
        current = self.as_dict(exclude_none=False)
        current.update(kwargs)
        return GenerationParams(**current)
