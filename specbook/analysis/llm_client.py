"""
External analysis service client.

The orchestrator only depends on the AnalysisService protocol; the
Anthropic implementation below is the production one.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Protocol

import anthropic
from dotenv import find_dotenv, load_dotenv

from ..errors import AnalysisServiceError, AnalysisTimeoutError
from .models import AnalysisRequest, ServiceResponse

logger = logging.getLogger(__name__)

# Auto-load .env from the working directory (or a parent)
load_dotenv(find_dotenv(usecwd=True))


class AnalysisService(Protocol):
    """One request in, one complete response out. No streaming."""

    async def complete(self, request: AnalysisRequest) -> ServiceResponse:
        ...


@dataclass
class AnthropicAnalysisService:
    """
    Anthropic Messages API client for analysis requests.

    Credentials come from ANTHROPIC_API_KEY (or ANTHROPIC_AUTH_TOKEN) and an
    optional ANTHROPIC_BASE_URL. The HTTP transport is bounded by
    timeout_seconds and never retried; failures surface as
    AnalysisServiceError.
    """

    api_key: str | None = None
    base_url: str | None = None
    timeout_seconds: float = 300.0
    _client: anthropic.AsyncAnthropic | None = field(default=None, repr=False)

    def __post_init__(self):
        """Initialize credentials from environment if not provided."""
        if self.api_key is None:
            self.api_key = os.environ.get("ANTHROPIC_API_KEY") or os.environ.get("ANTHROPIC_AUTH_TOKEN")
        if self.base_url is None:
            self.base_url = os.environ.get("ANTHROPIC_BASE_URL")

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Get or create the async Anthropic client."""
        if self._client is None:
            if not self.api_key:
                raise AnalysisServiceError("ANTHROPIC_API_KEY not set")
            client_kwargs: dict[str, Any] = {
                "api_key": self.api_key,
                "timeout": self.timeout_seconds,
                "max_retries": 0,
            }
            if self.base_url:
                client_kwargs["base_url"] = self.base_url
            self._client = anthropic.AsyncAnthropic(**client_kwargs)
        return self._client

    async def complete(self, request: AnalysisRequest) -> ServiceResponse:
        """
        Send one analysis request and wait for the whole response.

        Raises:
            AnalysisTimeoutError: the HTTP request timed out
            AnalysisServiceError: any other API or transport failure
        """
        request_params: dict[str, Any] = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "system": request.system_prompt,
            "messages": [{"role": "user", "content": request.user_prompt}],
        }

        try:
            client = self._get_client()
            response = await client.messages.create(**request_params)
        except AnalysisServiceError:
            raise
        except anthropic.APITimeoutError as e:
            raise AnalysisTimeoutError(f"Anthropic API timeout: {e}") from e
        except anthropic.APIError as e:
            raise AnalysisServiceError(f"Anthropic API error: {e}") from e
        except Exception as e:
            raise AnalysisServiceError(f"Analysis call failed: {e}") from e

        # Extract text from response blocks
        raw_text = ""
        for block in response.content:
            if block.type == "text":
                raw_text += block.text

        logger.debug(
            f"Analysis response: {len(raw_text)} chars, "
            f"in={response.usage.input_tokens} out={response.usage.output_tokens}"
        )

        return ServiceResponse(
            raw_text=raw_text,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=getattr(response, "model", None) or request.model,
        )


__all__ = ["AnalysisService", "AnthropicAnalysisService"]
