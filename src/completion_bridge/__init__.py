"""
Completion Bridge - generic agent protocol over OpenAI-compatible chat completions,
with recovery of tool calls written out as text.
"""

import logging

from .client import CompletionBridge, create_bridge
from .codec import JsonCodec
from .fallback import (
    DEFAULT_MATCH_THRESHOLD,
    DEFAULT_MAX_NESTING_DEPTH,
    ToolCallExtractor,
    extract_tool_call,
)
from .response import GenerationResult, ResultKind, TextResult, TokenUsage, ToolCallsResult
from .settings import BridgeSettings
from .types import (
    AssistantMessage,
    ConversationMessage,
    GenerationParams,
    Role,
    SystemMessage,
    ToolInvocation,
    ToolMessage,
    ToolParameters,
    ToolSpecification,
    UserMessage,
    message_from_dict,
)
from ._exceptions import BridgeError, ProtocolViolation, WireParseError, WireTransportError

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "CompletionBridge",
    "create_bridge",
    "JsonCodec",
    "DEFAULT_MATCH_THRESHOLD",
    "DEFAULT_MAX_NESTING_DEPTH",
    "ToolCallExtractor",
    "extract_tool_call",
    "GenerationResult",
    "ResultKind",
    "TextResult",
    "TokenUsage",
    "ToolCallsResult",
    "BridgeSettings",
    "AssistantMessage",
    "ConversationMessage",
    "GenerationParams",
    "Role",
    "SystemMessage",
    "ToolInvocation",
    "ToolMessage",
    "ToolParameters",
    "ToolSpecification",
    "UserMessage",
    "message_from_dict",
    "BridgeError",
    "ProtocolViolation",
    "WireParseError",
    "WireTransportError",
]
