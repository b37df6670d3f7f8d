"""Pure transformation adapters for the completion wire format."""

from .openai import ChatCompletionsAdapter

__all__ = [
    "ChatCompletionsAdapter",
]
