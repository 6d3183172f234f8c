"""Tests for AnthropicAnalysisService - the production analysis client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from specbook.analysis.llm_client import AnthropicAnalysisService
from specbook.analysis.models import AnalysisRequest
from specbook.errors import AnalysisServiceError, AnalysisTimeoutError


def make_request(**overrides) -> AnalysisRequest:
    params = dict(system_prompt="system", user_prompt="user", model="test-model", max_tokens=1024)
    params.update(overrides)
    return AnalysisRequest(**params)


def make_message(*texts, input_tokens=11, output_tokens=7, **extra):
    blocks = [SimpleNamespace(type="text", text=t) for t in texts]
    blocks.insert(0, SimpleNamespace(type="thinking", thinking="hmm"))
    return SimpleNamespace(
        content=blocks,
        **extra,
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def make_service(create: AsyncMock) -> AnthropicAnalysisService:
    mock_client = MagicMock()
    mock_client.messages.create = create
    return AnthropicAnalysisService(api_key="test-key", _client=mock_client)


class TestAnthropicAnalysisService:
    """Test suite for AnthropicAnalysisService."""

    def test_credentials_from_environment(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        monkeypatch.setenv("ANTHROPIC_BASE_URL", "https://proxy.example")
        service = AnthropicAnalysisService()
        assert service.api_key == "env-key"
        assert service.base_url == "https://proxy.example"

    def test_auth_token_fallback(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.setenv("ANTHROPIC_AUTH_TOKEN", "token")
        assert AnthropicAnalysisService().api_key == "token"

    def test_client_is_cached_and_not_retrying(self):
        service = AnthropicAnalysisService(api_key="test-key", timeout_seconds=42.0)
        client = service._get_client()
        assert service._get_client() is client
        assert client.max_retries == 0
        assert client.timeout == 42.0

    @pytest.mark.asyncio
    async def test_missing_key_raises(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.delenv("ANTHROPIC_AUTH_TOKEN", raising=False)
        service = AnthropicAnalysisService()
        with pytest.raises(AnalysisServiceError):
            await service.complete(make_request())

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self):
        create = AsyncMock(return_value=make_message('{"entries":', " []}"))
        service = make_service(create)

        response = await service.complete(make_request())

        assert response.raw_text == '{"entries": []}'
        assert response.input_tokens == 11
        assert response.output_tokens == 7
        assert response.model == "test-model"

    @pytest.mark.asyncio
    async def test_complete_sends_single_turn(self):
        create = AsyncMock(return_value=make_message("{}"))
        service = make_service(create)

        await service.complete(make_request(temperature=0.0))

        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 1024
        assert kwargs["system"] == "system"
        assert kwargs["messages"] == [{"role": "user", "content": "user"}]
        assert "stream" not in kwargs

    @pytest.mark.asyncio
    async def test_timeout_maps_to_timeout_error(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        service = make_service(AsyncMock(side_effect=anthropic.APITimeoutError(request=request)))

        with pytest.raises(AnalysisTimeoutError):
            await service.complete(make_request())

    @pytest.mark.asyncio
    async def test_api_error_maps_to_service_error(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        service = make_service(AsyncMock(side_effect=anthropic.APIConnectionError(request=request)))

        with pytest.raises(AnalysisServiceError) as exc_info:
            await service.complete(make_request())
        assert not isinstance(exc_info.value, AnalysisTimeoutError)

    @pytest.mark.asyncio
    async def test_unexpected_error_maps_to_service_error(self):
        service = make_service(AsyncMock(side_effect=RuntimeError("boom")))
        with pytest.raises(AnalysisServiceError, match="boom"):
            await service.complete(make_request())

    @pytest.mark.asyncio
    async def test_served_model_recorded(self):
        create = AsyncMock(return_value=make_message("{}", model="served-model-2"))
        response = await make_service(create).complete(make_request())
        assert response.model == "served-model-2"

    @pytest.mark.asyncio
    async def test_client_construction_failure_maps_to_service_error(self, monkeypatch):
        def broken_client(**kwargs):
            raise TypeError("Invalid timeout argument")

        monkeypatch.setattr(anthropic, "AsyncAnthropic", broken_client)
        service = AnthropicAnalysisService(api_key="test-key")

        with pytest.raises(AnalysisServiceError, match="Invalid timeout"):
            await service.complete(make_request())
