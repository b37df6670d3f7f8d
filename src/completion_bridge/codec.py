"""JSON codec handed to the bridge at construction time."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

__all__ = ["JsonCodec", "DEFAULT_CODEC"]


@dataclass(frozen=True, slots=True)
class JsonCodec:
    """
    Immutable serializer/deserializer pair.

    Key order is preserved in both directions, so arguments re-serialized
    from a parsed object keep the field order the model produced.
    """

    ensure_ascii: bool = False
    separators: tuple[str, str] = (",", ":")

    def dumps(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=self.ensure_ascii, separators=self.separators)

    def loads(self, text: str | bytes) -> Any:
        """Parse JSON text. Raises ``ValueError`` (``json.JSONDecodeError``) on bad input."""
        return json.loads(text)


DEFAULT_CODEC = JsonCodec()
