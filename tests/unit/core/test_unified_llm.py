"""Test unified LLM client functionality."""

import pytest
from unittest.mock import AsyncMock, patch

from legalyze.core.exceptions import APIClientError, ConfigurationError
from legalyze.core.unified_llm import (
    LLMProvider,
    UnifiedLLMClient,
    create_llm_client_from_settings,
)


def test_unified_llm_with_gemini():
    client = UnifiedLLMClient(
        provider="gemini",
        api_key="test_gemini_key",
        model="gemini-2.0-flash",
    )

    assert client.provider == LLMProvider.GEMINI
    assert client.fallback_client is None


def test_unified_llm_with_openrouter_and_fallback():
    client = UnifiedLLMClient(
        provider="openrouter",
        api_key="test_openrouter_key",
        model="google/gemini-2.0-flash-001",
        fallback_to_gemini=True,
        gemini_api_key="test_gemini_key",
    )

    assert client.provider == LLMProvider.OPENROUTER
    assert client.fallback_client is not None


def test_fallback_without_gemini_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        UnifiedLLMClient(
            provider="openrouter",
            api_key="test_openrouter_key",
            model="m",
            fallback_to_gemini=True,
        )


@pytest.mark.asyncio
async def test_generate_content_uses_fallback_on_primary_failure():
    with patch("legalyze.core.unified_llm.OpenRouterClient") as mock_openrouter, \
            patch("legalyze.core.unified_llm.GeminiClient") as mock_gemini:
        mock_openrouter.return_value.generate_content = AsyncMock(side_effect=APIClientError("429"))
        mock_gemini.return_value.generate_content = AsyncMock(return_value='{"summary": "S"}')

        client = UnifiedLLMClient(
            provider="openrouter",
            api_key="key",
            model="m",
            fallback_to_gemini=True,
            gemini_api_key="gkey",
        )
        result = await client.generate_content(contents="prompt")

    assert result == '{"summary": "S"}'


@pytest.mark.asyncio
async def test_generate_content_without_fallback_reraises():
    with patch("legalyze.core.unified_llm.GeminiClient") as mock_gemini:
        mock_gemini.return_value.generate_content = AsyncMock(side_effect=APIClientError("boom"))
        client = UnifiedLLMClient(provider="gemini", api_key="key", model="m")

        with pytest.raises(APIClientError, match="boom"):
            await client.generate_content(contents="prompt")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"provider": "gemini", "gemini_api_key": ""},
        {"provider": "gemini", "gemini_api_key": "   "},
        {"provider": "openrouter", "openrouter_api_key": ""},
        {"provider": "ollama", "gemini_api_key": "key"},
    ],
)
def test_factory_rejects_missing_keys_and_unknown_providers(kwargs):
    with pytest.raises(ConfigurationError):
        create_llm_client_from_settings(**kwargs)


def test_factory_selects_provider_settings():
    client = create_llm_client_from_settings(
        provider="OpenRouter",
        openrouter_api_key=" key ",
        openrouter_model="some/model",
        timeout=15,
    )

    assert client.provider == LLMProvider.OPENROUTER
    assert client.model == "some/model"
    assert client.client.api_key == "key"
    assert client.timeout == 15
