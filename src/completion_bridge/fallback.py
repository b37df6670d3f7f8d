"""
Recover a tool invocation from assistant text.

Some OpenAI-compatible servers ignore the structured ``tool_calls`` channel
and have the model write the call into ``content`` instead. Three shapes are
recognised:

1. ``{"name": "createAccessRequest", "arguments": {...}}``
2. ``{"content": {"name": ..., "arguments": ...}}`` or ``{"content": "<json text>"}``
3. ``{"portalName": "...", "reason": "..."}``: bare arguments, matched
   against the advertised tool specifications by parameter names.

Failure to recover is the common case and is never an error: the extractor
returns ``None`` and the caller keeps the plain text.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Final, Optional, Sequence

from completion_bridge.codec import DEFAULT_CODEC, JsonCodec
from completion_bridge.types import ToolInvocation, ToolSpecification

__all__ = [
    "DEFAULT_MATCH_THRESHOLD",
    "DEFAULT_MAX_NESTING_DEPTH",
    "ToolCallExtractor",
    "extract_tool_call",
    "new_call_id",
]

logger = logging.getLogger(__name__)

# Share of a spec's properties that bare arguments must cover to match it
DEFAULT_MATCH_THRESHOLD: Final = 0.8
# How many levels of {"content": "<json text>"} wrapping are unwrapped
DEFAULT_MAX_NESTING_DEPTH: Final = 3


def new_call_id() -> str:
    return f"call_{uuid.uuid4().hex}"


@dataclass(frozen=True)
class ToolCallExtractor:
    """
    Stateless fallback extractor; one instance can serve concurrent calls.

    Attributes:
        codec: Serializer used to parse content and re-encode arguments.
        match_threshold: Minimum fraction of a spec's properties that bare
            arguments must contain. Ties between specs go to the first one
            declared.
        max_depth: Maximum number of nested ``content`` strings unwrapped.
        id_factory: Produces correlation ids for synthesized invocations.
    """

    codec: JsonCodec = DEFAULT_CODEC
    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    max_depth: int = DEFAULT_MAX_NESTING_DEPTH
    id_factory: Callable[[], str] = field(default=new_call_id)

    def extract(
        self,
        content: Optional[str],
        specs: Optional[Sequence[ToolSpecification]] = None,
    ) -> Optional[ToolInvocation]:
        """Return the invocation encoded in ``content``, or None."""
        return self._extract(content, specs or (), depth=0)

    def _extract(
        self,
        content: Optional[str],
        specs: Sequence[ToolSpecification],
        depth: int,
    ) -> Optional[ToolInvocation]:
        if depth > self.max_depth:
            logger.debug("Nested tool-call content exceeds depth %d", self.max_depth)
            return None
        if content is None or not content.strip():
            return None

        try:
            parsed = self.codec.loads(content.strip())
        except (ValueError, RecursionError) as exc:
            logger.debug("Content is not a tool call JSON: %s", exc)
            return None

        if not isinstance(parsed, dict):
            return None

        if "name" in parsed and "arguments" in parsed:
            return self._direct_call(parsed, source="content")

        if "content" in parsed:
            inner = parsed["content"]
            if isinstance(inner, str):
                return self._extract(inner, specs, depth + 1)
            if isinstance(inner, dict) and "name" in inner and "arguments" in inner:
                return self._direct_call(inner, source="nested content")

        for spec in specs:
            if self.matches(parsed, spec):
                arguments_json = self.codec.dumps(parsed)
                logger.info(
                    "Recovered bare arguments for tool %s: %s", spec.name, arguments_json
                )
                return ToolInvocation(
                    id=self.id_factory(), name=spec.name, arguments_json=arguments_json
                )
        return None

    def _direct_call(self, obj: dict[str, Any], *, source: str) -> ToolInvocation:
        name = obj["name"]
        if not isinstance(name, str):
            name = self.codec.dumps(name)
        arguments_json = self.codec.dumps(obj["arguments"])
        logger.info("Recovered tool call %s from %s: %s", name, source, arguments_json)
        return ToolInvocation(id=self.id_factory(), name=name, arguments_json=arguments_json)

    def matches(self, candidate: Any, spec: ToolSpecification) -> bool:
        """
        True when ``candidate`` looks like the arguments of ``spec``.

        Every required parameter must be present and at least
        ``match_threshold`` of the declared properties must appear. Specs
        without declared properties never match.
        """
        if not isinstance(candidate, dict) or spec.parameters is None:
            return False
        properties = spec.parameters.properties
        if not properties:
            return False
        if any(name not in candidate for name in spec.parameters.required):
            return False

        present = sum(1 for name in properties if name in candidate)
        return present / len(properties) >= self.match_threshold


_default_extractor = ToolCallExtractor()


def extract_tool_call(
    content: Optional[str],
    specs: Optional[Sequence[ToolSpecification]] = None,
) -> Optional[ToolInvocation]:
    """Module-level shortcut using the default extractor settings."""
    return _default_extractor.extract(content, specs)
