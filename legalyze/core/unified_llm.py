"""Unified LLM client factory.

Provides one ``generate_content`` interface over Gemini and OpenRouter, with
provider selection driven by configuration.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from legalyze.core.exceptions import APIClientError, ConfigurationError
from legalyze.core.llm_client import GeminiClient, OpenRouterClient
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    GEMINI = "gemini"
    OPENROUTER = "openrouter"


class UnifiedLLMClient:
    """LLM client wrapping one provider and an optional Gemini fallback."""

    def __init__(
        self,
        provider: Union[str, LLMProvider],
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 60,
        max_retries: int = 1,
        fallback_to_gemini: bool = False,
        gemini_api_key: Optional[str] = None,
        gemini_model: Optional[str] = None,
    ):
        """Initialize unified LLM client.

        Args:
            provider: LLM provider to use ("gemini" or "openrouter")
            api_key: API key for the primary provider
            model: Model name to use
            base_url: Optional base URL (OpenRouter only)
            timeout: Request timeout in seconds
            max_retries: Total number of attempts per provider
            fallback_to_gemini: If True, fall back to Gemini on OpenRouter failure
            gemini_api_key: Gemini API key (required if fallback_to_gemini=True)
            gemini_model: Gemini model name (for fallback)
        """
        self.provider = LLMProvider(provider)
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.fallback_client = None

        if self.provider == LLMProvider.GEMINI:
            self.client = GeminiClient(
                api_key=api_key,
                model=model,
                timeout=timeout,
                max_retries=max_retries
            )
            LOGGER.info(f"Initialized unified LLM with Gemini provider (model: {model})")

        else:
            self.client = OpenRouterClient(
                api_key=api_key,
                model=model,
                base_url=base_url or "https://openrouter.ai/api/v1/chat/completions",
                timeout=timeout,
                max_retries=max_retries
            )

            if fallback_to_gemini:
                if not gemini_api_key:
                    raise ConfigurationError("GEMINI_API_KEY is required when ENABLE_LLM_FALLBACK is set")
                self.fallback_client = GeminiClient(
                    api_key=gemini_api_key,
                    model=gemini_model or "gemini-2.0-flash",
                    timeout=timeout,
                    max_retries=max_retries
                )
                LOGGER.info(
                    f"Initialized unified LLM with OpenRouter provider (model: {model}) "
                    f"and Gemini fallback (model: {gemini_model})"
                )
            else:
                LOGGER.info(f"Initialized unified LLM with OpenRouter provider (model: {model})")

    async def generate_content(
        self,
        contents: Union[str, List[Union[str, Dict[str, Any]]]],
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate content using the configured LLM provider.

        Raises:
            APIClientError: If generation fails on every configured provider
        """
        try:
            return await self.client.generate_content(
                contents=contents,
                system_instruction=system_instruction,
                generation_config=generation_config
            )
        except APIClientError as e:
            if not self.fallback_client:
                raise

            LOGGER.warning(
                f"Primary provider ({self.provider.value}) failed, attempting Gemini fallback: {e}"
            )
            try:
                return await self.fallback_client.generate_content(
                    contents=contents,
                    system_instruction=system_instruction,
                    generation_config=generation_config
                )
            except APIClientError as fallback_error:
                LOGGER.error(f"Fallback to Gemini also failed: {fallback_error}")
                raise APIClientError(
                    f"Both primary ({self.provider.value}) and fallback (Gemini) failed",
                    original_error=fallback_error,
                ) from fallback_error


def _clean_key(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def create_llm_client_from_settings(
    provider: str,
    gemini_api_key: str = "",
    gemini_model: str = "gemini-2.0-flash",
    openrouter_api_key: str = "",
    openrouter_api_url: str = "https://openrouter.ai/api/v1/chat/completions",
    openrouter_model: str = "google/gemini-2.0-flash-001",
    timeout: float = 60,
    max_retries: int = 1,
    enable_fallback: bool = False,
) -> UnifiedLLMClient:
    """Create a unified LLM client from configuration values.

    Selects the API key, model and base URL that belong to ``provider``.

    Raises:
        ConfigurationError: If the provider is unknown or its API key is missing
    """
    try:
        provider_enum = LLMProvider((provider or "").strip().lower())
    except ValueError as e:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}", original_error=e) from e

    if provider_enum == LLMProvider.GEMINI:
        api_key = _clean_key(gemini_api_key)
        if not api_key:
            raise ConfigurationError(
                "gemini_api_key required when provider='gemini'. "
                "Please set GEMINI_API_KEY environment variable."
            )
        return UnifiedLLMClient(
            provider=provider_enum,
            api_key=api_key,
            model=gemini_model,
            timeout=timeout,
            max_retries=max_retries,
        )

    api_key = _clean_key(openrouter_api_key)
    if not api_key:
        raise ConfigurationError(
            "openrouter_api_key required when provider='openrouter'. "
            "Please set OPENROUTER_API_KEY environment variable."
        )
    return UnifiedLLMClient(
        provider=provider_enum,
        api_key=api_key,
        model=openrouter_model,
        base_url=openrouter_api_url,
        timeout=timeout,
        max_retries=max_retries,
        fallback_to_gemini=enable_fallback,
        gemini_api_key=_clean_key(gemini_api_key) or None,
        gemini_model=gemini_model,
    )
