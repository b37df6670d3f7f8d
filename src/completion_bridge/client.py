"""
Completion bridge with a single async generate() method.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Self, Sequence

from openai import APIError, AsyncOpenAI, DefaultAsyncHttpxClient

from completion_bridge._exceptions import WireParseError, classify_error
from completion_bridge.adapters import ChatCompletionsAdapter
from completion_bridge.adapters.openai import MessageLike
from completion_bridge.codec import DEFAULT_CODEC, JsonCodec
from completion_bridge.fallback import ToolCallExtractor
from completion_bridge.params import ParamsLike, merge_params, normalize_params
from completion_bridge.response import GenerationResult
from completion_bridge.settings import DEFAULT_TIMEOUT, BridgeSettings, auth_metadata
from completion_bridge.types import ToolSpecification

__all__ = ["CompletionBridge", "create_bridge"]


class CompletionBridge:
    """
    Translator between the generic agent protocol and an OpenAI-compatible
    chat-completions endpoint (async-only).

    Holds only read-only configuration, so one instance can serve concurrent
    ``generate`` calls. Failed calls are never retried.

    Use ``CompletionBridge.from_client`` when you already have an ``AsyncOpenAI`` instance.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        params: ParamsLike = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        codec: JsonCodec = DEFAULT_CODEC,
        extractor: Optional[ToolCallExtractor] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Args:
            model: Model identifier sent with every request.
            api_key: Bearer token for the ``Authorization`` header.
            base_url: Endpoint root; requests go to ``<base_url>/chat/completions``.
            username: Optional auth passthrough, sent as ``metadata.username``.
            password: Optional auth passthrough, sent as ``metadata.pwd``.
            params: Default generation parameters (dict or GenerationParams).
            timeout: Transport timeout in seconds.
            verify_ssl: Set False for internal endpoints with self-signed certificates.
            codec: JSON codec used for response bodies and tool arguments.
            extractor: Fallback tool-call extractor; defaults to one using ``codec``.
            logger: Optional logger instance. If None, a logger named after
                    this module will be used.
            name: Optional name for this component, used in logging.
        """
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=None if verify_ssl else DefaultAsyncHttpxClient(verify=False),
        )
        self._configure(
            model,
            client,
            username=username,
            password=password,
            params=params,
            codec=codec,
            extractor=extractor,
            logger=logger,
            name=name,
        )

    # Alternate constructors
    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncOpenAI,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        params: ParamsLike = None,
        codec: JsonCodec = DEFAULT_CODEC,
        extractor: Optional[ToolCallExtractor] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build a bridge around an already-configured ``AsyncOpenAI`` client.

        The client's timeout and base URL are kept; retries are switched off.
        """
        if not isinstance(client, AsyncOpenAI):
            raise TypeError(
                f"CompletionBridge.from_client expects AsyncOpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        self._configure(
            model,
            client.with_options(max_retries=0),
            username=username,
            password=password,
            params=params,
            codec=codec,
            extractor=extractor,
            logger=logger,
            name=name,
        )
        return self

    @classmethod
    def from_settings(
        cls,
        settings: BridgeSettings,
        **kwargs: Any,
    ) -> Self:
        """Build a bridge from ``BridgeSettings`` (see ``BridgeSettings.from_env``)."""
        return cls(
            settings.model,
            api_key=settings.api_key,
            base_url=settings.base_url,
            username=settings.username,
            password=settings.password,
            params=settings.params,
            timeout=settings.timeout,
            verify_ssl=settings.verify_ssl,
            **kwargs,
        )

    def _configure(
        self,
        model: str,
        client: AsyncOpenAI,
        *,
        username: Optional[str],
        password: Optional[str],
        params: ParamsLike,
        codec: JsonCodec,
        extractor: Optional[ToolCallExtractor],
        logger: Optional[logging.Logger],
        name: Optional[str],
    ) -> None:
        self.model = model
        self.logger = logger or logging.getLogger(__name__)
        self.name = name or self.__class__.__name__
        self.codec = codec
        self.defaults = normalize_params(params)
        self.metadata = auth_metadata(username, password)
        self._client = client
        self._adapter = ChatCompletionsAdapter(
            codec=codec,
            extractor=extractor or ToolCallExtractor(codec=codec),
        )

    @property
    def adapter(self) -> ChatCompletionsAdapter:
        """Request/response adapter used by this bridge."""
        return self._adapter

    async def generate(
        self,
        messages: Sequence[MessageLike],
        tools: Optional[Sequence[ToolSpecification]] = None,
        *,
        params: ParamsLike = None,
    ) -> GenerationResult:
        """
        Send the conversation and return the assistant's answer.

        Returns a TextResult or a ToolCallsResult (structured tool calls, or
        one recovered from the text), both carrying token usage.

        Raises:
            WireTransportError: connection failure, timeout or non-2xx status.
            WireParseError: the response body is not valid JSON.
            ProtocolViolation: the response (or a request message) has the wrong shape.
        """
        final_params = merge_params(self.defaults, params)
        request = self._adapter.to_provider(
            messages,
            final_params,
            model=self.model,
            tools=tools,
            metadata=self.metadata,
        )

        if tools:
            self._log(
                f"Sending request to model {self.model} with {len(tools)} tool(s): "
                f"{[t.name for t in tools]}"
            )
        else:
            self._log(f"Sending request to model {self.model}")

        raw = await self._send(request)
        return self._adapter.from_provider(raw, tools)

    async def _send(self, request: dict[str, Any]) -> Any:
        """POST the wire request and decode the JSON body."""
        body = dict(request)
        model = body.pop("model")
        messages = body.pop("messages")

        try:
            # everything besides model/messages goes out verbatim
            response = await self._client.chat.completions.with_raw_response.create(
                model=model,
                messages=messages,
                extra_body=body,
            )
        except (APIError, TimeoutError, ConnectionError) as exc:
            raise classify_error(exc, self.logger) from exc

        text = response.http_response.text
        try:
            return self.codec.loads(text)
        except (ValueError, RecursionError) as exc:
            self._log(f"Response body is not JSON: {text[:200]!r}", logging.WARNING)
            raise WireParseError("Completion endpoint returned a non-JSON body", exc) from exc

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """Close the underlying HTTP client. Safe to call multiple times."""
        await self._client.close()

    async def __aenter__(self) -> "CompletionBridge":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def create_bridge(
    model: str | None = None,
    *,
    base_url: str | None = None,
    api_key: str | None = None,
    client: AsyncOpenAI | None = None,
    settings: BridgeSettings | None = None,
    logger: logging.Logger | None = None,
    **bridge_kwargs: Any,
) -> CompletionBridge:
    """
    Factory for creating a bridge.

    Args:
        model: Model identifier; pulled from the environment if omitted.
        base_url: Endpoint root; pulled from the environment if omitted.
        api_key: Overrides automatic lookup; if omitted, pulled from env.
        client: Optional pre-configured ``AsyncOpenAI`` instance to use.
        settings: Explicit settings; when given, the environment is not read.
        logger: Optional custom logger.
        **bridge_kwargs: Any extra args to pass through (params, codec, extractor, ...).
    """
    if client is not None:  # use caller-supplied client verbatim
        if model is None:
            raise ValueError("model is required when passing a client")
        return CompletionBridge.from_client(model, client, logger=logger, **bridge_kwargs)

    if settings is None and (model is None or base_url is None or api_key is None):
        settings = BridgeSettings.from_env()

    if settings is not None:
        settings = replace(
            settings,
            model=model or settings.model,
            base_url=base_url or settings.base_url,
            api_key=api_key or settings.api_key,
        )
        return CompletionBridge.from_settings(settings, logger=logger, **bridge_kwargs)

    return CompletionBridge(model, api_key=api_key, base_url=base_url, logger=logger, **bridge_kwargs)
