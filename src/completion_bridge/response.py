from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar, Optional, Union

from completion_bridge.types import AssistantMessage, ToolInvocation

_logger = logging.getLogger(__name__)


class ResultKind(StrEnum):
    TEXT = "text"
    TOOL_CALLS = "tool_calls"


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        # int(inf) overflows
        return None


@dataclass(frozen=True, slots=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_wire(cls, raw: Any) -> "TokenUsage":
        """
        Read the optional ``usage`` object of a completion response.

        Missing prompt/completion counts become 0 and a missing total becomes
        their sum. Anything unreadable yields all-zero usage; this never raises.
        """
        usage = raw.get("usage") if isinstance(raw, dict) else None
        if not isinstance(usage, dict):
            if usage is not None:
                _logger.debug("Ignoring non-object usage field: %r", usage)
            return cls()

        prompt = _as_int(usage.get("prompt_tokens")) or 0
        completion = _as_int(usage.get("completion_tokens")) or 0
        total = _as_int(usage.get("total_tokens"))
        return cls(
            prompt_tokens=prompt,
            completion_tokens=completion,
            total_tokens=prompt + completion if total is None else total,
        )


@dataclass(frozen=True, slots=True)
class TextResult:
    """A plain-text assistant answer."""

    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    kind: ClassVar[ResultKind] = ResultKind.TEXT

    @property
    def has_tool_calls(self) -> bool:
        return False

    def to_message(self) -> Optional[AssistantMessage]:
        """The assistant turn for the history, or None for an empty reply."""
        if not self.content:
            return None
        return AssistantMessage(content=self.content)


@dataclass(frozen=True, slots=True)
class ToolCallsResult:
    """One or more tool invocations, structured or recovered from text."""

    invocations: tuple[ToolInvocation, ...]
    usage: TokenUsage = field(default_factory=TokenUsage)
    kind: ClassVar[ResultKind] = ResultKind.TOOL_CALLS

    def __post_init__(self) -> None:
        object.__setattr__(self, "invocations", tuple(self.invocations))

    @property
    def has_tool_calls(self) -> bool:
        return True

    def to_message(self) -> AssistantMessage:
        """The assistant turn to append to the history before sending tool results."""
        return AssistantMessage(content=None, tool_invocations=self.invocations)


GenerationResult = Union[TextResult, ToolCallsResult]
