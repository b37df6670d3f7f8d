"""
Provider-neutral dataclasses for client-side tool use.

They are intentionally minimal: everything wire-specific lives in adapters.
"""
from __future__ import annotations

import inspect
import json
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

__all__ = ["ToolParameters", "ToolSpecification", "ToolInvocation"]


_JSON_TYPES: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


@dataclass(frozen=True, slots=True)
class ToolParameters:
    """JSON-schema style description of a tool's arguments."""
    type: str = "object"
    properties: Mapping[str, dict[str, Any]] = field(default_factory=dict)
    required: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # accept lists from callers, keep the stored value hashable/immutable
        object.__setattr__(self, "required", tuple(self.required))


@dataclass(frozen=True, slots=True)
class ToolSpecification:
    """A callable action advertised to the remote model."""
    name: str
    description: str = ""
    parameters: Optional[ToolParameters] = None

    @classmethod
    def from_openai(cls, tool: Mapping[str, Any]) -> "ToolSpecification":
        """
        Build a spec from an OpenAI-style tool dict.

        Accepts either ``{"type": "function", "function": {...}}`` or the bare
        ``function`` object.
        """
        fn = tool.get("function", tool)
        params = fn.get("parameters")
        parameters = None
        if params is not None:
            parameters = ToolParameters(
                type=params.get("type") or "object",
                properties=dict(params.get("properties") or {}),
                required=tuple(params.get("required") or ()),
            )
        return cls(
            name=fn["name"],
            description=fn.get("description") or "",
            parameters=parameters,
        )

    @classmethod
    def from_function(
        cls,
        func: Callable[..., Any],
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "ToolSpecification":
        """
        Build a spec from a Python callable's signature and docstring.

        Parameters without a default are required. Annotations of ``str``,
        ``int``, ``float``, ``bool``, ``list`` and ``dict`` map to the matching
        JSON-schema type; anything else is advertised as ``string``.

        Example:
            def create_access_request(portal_name: str, reason: str) -> str:
                '''Create an access request for a portal.'''

            spec = ToolSpecification.from_function(create_access_request)
        """
        try:
            hints = typing.get_type_hints(func)
        except (NameError, TypeError):
            hints = {}

        properties: dict[str, dict[str, Any]] = {}
        required: list[str] = []
        for param_name, param in inspect.signature(func).parameters.items():
            if param_name in ("self", "cls"):
                continue
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            hint = typing.get_origin(hints.get(param_name)) or hints.get(param_name)
            properties[param_name] = {"type": _JSON_TYPES.get(hint, "string")}
            if param.default is inspect.Parameter.empty:
                required.append(param_name)

        return cls(
            name=name or func.__name__,
            description=description or inspect.getdoc(func) or "",
            parameters=ToolParameters(properties=properties, required=tuple(required)),
        )


@dataclass(frozen=True, slots=True)
class ToolInvocation:
    """A request emitted by the model (or recovered from its text) to call a local tool."""
    id: str
    name: str
    arguments_json: str   # raw JSON text, never re-encoded

    def arguments(self) -> dict[str, Any]:
        """Parse ``arguments_json``; blank text yields an empty dict."""
        if not self.arguments_json.strip():
            return {}
        parsed = json.loads(self.arguments_json)
        if not isinstance(parsed, dict):
            raise ValueError(f"Tool arguments for {self.name!r} are not a JSON object")
        return parsed
