"""Structured generation against the Anthropic Messages API."""
from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol
import httpx
from app.core.config import settings
from app.core.errors import GenerationTimeout, GenerationUpstreamFailure
from app.core.validation import ValidationIssue
from app.llm import prompts
from app.llm.parsing import extract_json_object
from app.schemas.generation import GenerationHints

log = logging.getLogger(__name__)


@dataclass
class GenerationRequest:
    """What to ask the model for. A repair request carries the rejected candidate and its errors."""
    prompt: str
    hints: GenerationHints = field(default_factory=GenerationHints)
    repair_errors: List[ValidationIssue] = field(default_factory=list)
    previous_candidate: Optional[Dict[str, Any]] = None
    existing_config: Optional[Dict[str, Any]] = None

    @property
    def is_repair(self) -> bool:
        return bool(self.repair_errors)

    def system_prompt(self) -> str:
        if self.existing_config is not None:
            return prompts.CONFIG_SYSTEM_PROMPT + prompts.MODIFY_SYSTEM_SUFFIX
        return prompts.CONFIG_SYSTEM_PROMPT

    def user_message(self) -> str:
        if self.existing_config is not None:
            message = prompts.build_modify_message(self.existing_config, self.prompt)
        else:
            message = prompts.build_user_message(self.prompt, self.hints)
        if self.is_repair:
            message = prompts.build_repair_message(message, self.previous_candidate, self.repair_errors)
        return message


class StructuredGenerator(Protocol):
    """Anything that turns a GenerationRequest into a parsed JSON object."""

    model: str
    temperature: float

    async def generate_structured(self, request: GenerationRequest) -> Dict[str, Any]:
        ...


class AnthropicStructuredClient:
    API_VERSION = "2023-06-01"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client. Unset arguments fall back to settings.

        Args:
            api_key: Anthropic API key
            model: Model name
            base_url: Messages endpoint URL
            max_tokens: Response token limit
            temperature: Sampling temperature
            timeout: Per-request HTTP timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.anthropic_model
        self._base_url = base_url or settings.anthropic_base_url
        self.max_tokens = max_tokens or settings.anthropic_max_tokens
        self.temperature = temperature if temperature is not None else settings.anthropic_temperature
        self._timeout = timeout if timeout is not None else settings.generation_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        if not self._api_key:
            raise GenerationUpstreamFailure("ANTHROPIC_API_KEY is not configured")
        return {
            "x-api-key": self._api_key,
            "anthropic-version": self.API_VERSION,
            "content-type": "application/json",
        }

    async def generate_structured(self, request: GenerationRequest) -> Dict[str, Any]:
        body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": request.system_prompt(),
            "messages": [{"role": "user", "content": request.user_message()}],
        }
        headers = self._headers()
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._base_url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise GenerationTimeout(f"Model request timed out: {e}") from e
        except httpx.RequestError as e:
            raise GenerationUpstreamFailure(f"Model request failed: {e}") from e

        latency_ms = (time.perf_counter() - start) * 1000
        log.info(
            "Model responded status=%s latency_ms=%.0f repair=%s",
            response.status_code, latency_ms, request.is_repair,
        )

        if response.status_code >= 400:
            try:
                error_body = response.json()
            except ValueError:
                error_body = {}
            error = error_body.get("error") if isinstance(error_body, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            raise GenerationUpstreamFailure(message or response.text or "Model request failed", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationUpstreamFailure("Model response was not JSON", response.status_code) from e
        if not isinstance(data, dict):
            raise GenerationUpstreamFailure("Model response had an unexpected shape", response.status_code)

        text = ""
        for block in data.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "text":
                text += block.get("text", "")

        parsed = extract_json_object(text)
        if parsed is None:
            raise GenerationUpstreamFailure("Model response contained no JSON object")
        return parsed
