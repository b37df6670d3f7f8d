"""
Parameter normalization for completion-bridge.

Public API
- Callers pass a dict or a `GenerationParams` to `params` on
  `CompletionBridge.generate`, or set bridge-wide defaults at construction.

Contract
- Standard keys map onto the wire request:
  temperature: float
  max_tokens: int
  top_p: float
  frequency_penalty: float
  presence_penalty: float
  seed: int

- Provider specific keys go under `extra` and pass through unchanged.
  Examples:
    extra.stop: list[str]
    extra.response_format: dict

Unknown top-level keys are moved into extra.
Unknown extra keys are forwarded as-is.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Union

from completion_bridge.types import GenerationParams

STANDARD_KEYS = {f.name for f in fields(GenerationParams)} - {"extra"}

ParamsLike = Union[GenerationParams, dict[str, Any], None]


def normalize_params(params: ParamsLike) -> GenerationParams:
    """
    Normalize user-supplied params into a `GenerationParams`.

    Rules:
      - None gives the defaults
      - Keys not in STANDARD_KEYS are moved into extra
      - If the caller already passed an `extra` dict it is merged last
      - None values fall back to the default for that key

    Example
    -------
    >>> normalize_params({"temperature": 0.2, "stop": ["\\n"]})
    GenerationParams(temperature=0.2, max_tokens=1500, top_p=0.9,
                     frequency_penalty=0.5, presence_penalty=0.3, seed=-1,
                     extra={'stop': ['\\n']})
    """
    if params is None:
        return GenerationParams()
    if isinstance(params, GenerationParams):
        return params.copy(extra=dict(params.extra))
    if not isinstance(params, dict):
        raise TypeError(f"params must be a dict or GenerationParams, got {type(params).__name__}")

    user_extra = params.get("extra") or {}
    if not isinstance(user_extra, dict):
        raise TypeError("params['extra'] must be a dict")

    std: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in params.items():
        if key == "extra":
            continue
        if key in STANDARD_KEYS:
            if value is not None:
                std[key] = value
        else:
            extra[key] = value

    # moved unknowns first, then user-provided extra wins
    return GenerationParams(**std, extra={**extra, **user_extra})


def merge_params(defaults: ParamsLike, overrides: ParamsLike) -> GenerationParams:
    """
    Merge bridge defaults with per-call overrides, then normalize.

    Rules:
      - Standard keys set in overrides win
      - `extra` is merged with overrides winning per key
      - A `GenerationParams` override replaces every standard key
    """
    base = normalize_params(defaults)
    if overrides is None:
        return base
    if isinstance(overrides, GenerationParams):
        return overrides.copy(extra={**base.extra, **overrides.extra})

    over = normalize_params(overrides)
    explicit = {
        k: getattr(over, k)
        for k in STANDARD_KEYS
        if overrides.get(k) is not None
    }
    return base.copy(**explicit, extra={**base.extra, **over.extra})
