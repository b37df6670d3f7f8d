from .chat import (
    Role,
    SystemMessage,
    UserMessage,
    AssistantMessage,
    ToolMessage,
    ConversationMessage,
    ChatMessage,
    GenerationParams,
    message_from_dict,
)
from .tool import ToolParameters, ToolSpecification, ToolInvocation

__all__ = [
    "Role",
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "ToolMessage",
    "ConversationMessage",
    "ChatMessage",
    "GenerationParams",
    "message_from_dict",
    "ToolParameters",
    "ToolSpecification",
    "ToolInvocation",
]
