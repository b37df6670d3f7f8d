from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Final, Optional, TypeVar

from dotenv import load_dotenv

from completion_bridge.types import GenerationParams

__all__ = ["BridgeSettings", "auth_metadata", "get_env"]

T = TypeVar("T")

DEFAULT_TIMEOUT: Final = 60.0

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def get_env(name: str) -> str:
    """Return the value of a required environment variable or raise RuntimeError."""
    try:
        value = os.environ[name]
    except KeyError as exc:
        raise RuntimeError(f"{name} missing") from exc
    if not value:
        raise RuntimeError(f"{name} missing")
    return value


def auth_metadata(username: Optional[str], password: Optional[str]) -> dict[str, str] | None:
    """The request ``metadata`` auth passthrough, or None without credentials."""
    if username is None and password is None:
        return None
    return {"username": username or "", "pwd": password or ""}


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Not a boolean: {raw!r}")


def _optional(name: str, convert: Callable[[str], T], default: T) -> T:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return convert(raw)
    except ValueError as exc:
        raise ValueError(f"{name} has an invalid value: {raw!r}") from exc


@dataclass(frozen=True)
class BridgeSettings:
    """Read-only configuration for one completion endpoint."""

    base_url: str
    api_key: str
    model: str
    username: Optional[str] = None
    password: Optional[str] = None
    params: GenerationParams = field(default_factory=GenerationParams)
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True

    @property
    def metadata(self) -> dict[str, str] | None:
        """Auth passthrough fields sent in the request ``metadata`` object."""
        return auth_metadata(self.username, self.password)

    @classmethod
    def from_env(cls, prefix: str = "LLM_") -> "BridgeSettings":
        """
        Build settings from the environment (and a ``.env`` file, if present).

        Required: ``{prefix}BASE_URL``, ``{prefix}API_KEY``, ``{prefix}MODEL``.
        Optional: ``USERNAME``, ``PASSWORD``, ``TEMPERATURE``, ``MAX_TOKENS``,
        ``TOP_P``, ``FREQUENCY_PENALTY``, ``PRESENCE_PENALTY``, ``SEED``,
        ``TIMEOUT``, ``VERIFY_SSL``.
        """
        load_dotenv()
        defaults = GenerationParams()
        params = GenerationParams(
            temperature=_optional(f"{prefix}TEMPERATURE", float, defaults.temperature),
            max_tokens=_optional(f"{prefix}MAX_TOKENS", int, defaults.max_tokens),
            top_p=_optional(f"{prefix}TOP_P", float, defaults.top_p),
            frequency_penalty=_optional(
                f"{prefix}FREQUENCY_PENALTY", float, defaults.frequency_penalty
            ),
            presence_penalty=_optional(
                f"{prefix}PRESENCE_PENALTY", float, defaults.presence_penalty
            ),
            seed=_optional(f"{prefix}SEED", int, defaults.seed),
        )
        return cls(
            base_url=get_env(f"{prefix}BASE_URL"),
            api_key=get_env(f"{prefix}API_KEY"),
            model=get_env(f"{prefix}MODEL"),
            username=os.environ.get(f"{prefix}USERNAME") or None,
            password=os.environ.get(f"{prefix}PASSWORD") or None,
            params=params,
            timeout=_optional(f"{prefix}TIMEOUT", float, DEFAULT_TIMEOUT),
            verify_ssl=_optional(f"{prefix}VERIFY_SSL", _parse_bool, True),
        )
