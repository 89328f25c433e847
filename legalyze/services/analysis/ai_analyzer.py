"""Generative-text analysis of extracted document text.

``DocumentAIAnalyzer.analyze`` is the only contract the orchestrator uses. It
returns a validated ``Analysis`` or raises one of two degradable errors:
``APIClientError`` (including ``APITimeoutError``) or ``ResponseSchemaError``.
"""

import asyncio
from typing import Any, Dict, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from legalyze.core.config import settings
from legalyze.core.exceptions import APIClientError, APITimeoutError, ResponseSchemaError
from legalyze.core.unified_llm import create_llm_client_from_settings
from legalyze.prompts.analysis_prompts import (
    ANALYSIS_RESPONSE_SCHEMA,
    ANALYSIS_SYSTEM_INSTRUCTION,
    build_analysis_prompt,
)
from legalyze.schemas.analysis import Analysis
from legalyze.utils.json_parser import parse_json_safely
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)


class TextGenerationClient(Protocol):
    async def generate_content(
        self,
        contents: Any,
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        ...


class DocumentAIAnalyzer:
    """Produces a structured legal analysis through an LLM client."""

    def __init__(
        self,
        client: TextGenerationClient,
        timeout_seconds: float = 60.0,
        temperature: float = 0.2,
        max_input_chars: int = 30000,
    ):
        """Initialize the analyzer.

        Args:
            client: Any object exposing ``generate_content``
            timeout_seconds: Upper bound on one AI call
            temperature: Sampling temperature sent to the model
            max_input_chars: Document text beyond this length is dropped
        """
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_input_chars = max_input_chars

    async def analyze(self, text: str) -> Analysis:
        """Analyze document text.

        Args:
            text: Extracted document text

        Returns:
            Validated Analysis

        Raises:
            APIClientError: Transport failure or non-success response
            APITimeoutError: The call exceeded ``timeout_seconds``
            ResponseSchemaError: The response is not a valid analysis object
        """
        document_text = text[:self.max_input_chars]
        if len(text) > self.max_input_chars:
            LOGGER.info(
                f"Truncated document text from {len(text)} to {self.max_input_chars} characters"
            )

        raw_response = await self._generate(build_analysis_prompt(document_text))
        return self.parse_response(raw_response)

    async def _generate(self, prompt: str) -> str:
        try:
            return await asyncio.wait_for(
                self.client.generate_content(
                    contents=prompt,
                    system_instruction=ANALYSIS_SYSTEM_INSTRUCTION,
                    generation_config={
                        "temperature": self.temperature,
                        "response_mime_type": "application/json",
                        "response_schema": ANALYSIS_RESPONSE_SCHEMA,
                    },
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise APITimeoutError(
                f"AI analysis timed out after {self.timeout_seconds}s", original_error=e
            ) from e
        except APIClientError:
            raise
        except Exception as e:
            raise APIClientError(f"AI analysis request failed: {e}", original_error=e) from e

    @staticmethod
    def parse_response(raw_response: str) -> Analysis:
        """Validate raw model output into an ``Analysis``.

        Raises:
            ResponseSchemaError: Unparseable, non-object or wrongly typed payload
        """
        payload = parse_json_safely(raw_response)
        if not isinstance(payload, dict):
            raise ResponseSchemaError(
                f"AI response is not a JSON object (got {type(payload).__name__})"
            )

        try:
            return Analysis.model_validate(payload)
        except PydanticValidationError as e:
            raise ResponseSchemaError(
                f"AI response does not match the analysis schema: {e.error_count()} errors",
                original_error=e,
            ) from e


def create_document_analyzer() -> DocumentAIAnalyzer:
    """Build an analyzer from application settings.

    Raises:
        ConfigurationError: If the configured provider has no API key
    """
    llm = settings.llm
    client = create_llm_client_from_settings(
        provider=llm.provider,
        gemini_api_key=llm.gemini_api_key,
        gemini_model=llm.gemini_model,
        openrouter_api_key=llm.openrouter_api_key,
        openrouter_api_url=llm.openrouter_api_url,
        openrouter_model=llm.openrouter_model,
        timeout=llm.timeout_seconds,
        max_retries=llm.max_retries,
        enable_fallback=llm.enable_fallback,
    )
    return DocumentAIAnalyzer(
        client=client,
        timeout_seconds=llm.timeout_seconds,
        temperature=llm.temperature,
        max_input_chars=llm.max_input_chars,
    )
