import asyncio
from typing import Dict, Any, Optional, List, Union

import httpx
from httpx import TimeoutException, HTTPStatusError

from legalyze.core.exceptions import APIClientError, APITimeoutError
from legalyze.utils.logging import get_logger
from google import genai
from google.genai import types

LOGGER = get_logger(__name__)


class BaseLLMClient:
    """Base client for HTTP-based LLM APIs.

    Handles request building, optional retries, timeout management and
    error logging. ``max_retries`` is the total number of attempts.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 60,
        max_retries: int = 1,
        retry_delay: int = 2
    ):
        """Initialize the LLM client.

        Args:
            api_key: API key for authentication
            base_url: Base URL for the API
            timeout: Request timeout in seconds
            max_retries: Total number of attempts
            retry_delay: Base delay for exponential backoff
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.logger = LOGGER

    async def call_api(
        self,
        endpoint: str = "",
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """POST a JSON payload and return the parsed JSON response.

        Raises:
            APIClientError: If the API call fails
            APITimeoutError: If the API call times out
        """
        url = f"{self.base_url}{endpoint}" if endpoint else self.base_url

        default_headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        if headers:
            default_headers.update(headers)

        self.logger.debug(
            f"Calling LLM API: {url}",
            extra={"timeout": self.timeout}
        )

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(self.max_retries):
                try:
                    response = await client.post(url, headers=default_headers, json=payload)
                    response.raise_for_status()
                    return response.json()

                except HTTPStatusError as e:
                    await self._handle_http_error(e, attempt, url)

                except TimeoutException as e:
                    await self._handle_timeout_error(e, attempt, url)

                except Exception as e:
                    await self._handle_generic_error(e, attempt, url)

        raise APIClientError(f"Failed to call API {url} after {self.max_retries} attempts")

    async def _handle_http_error(self, error: HTTPStatusError, attempt: int, url: str):
        status_code = error.response.status_code
        error_body = error.response.text

        self.logger.warning(
            f"API HTTP error (Attempt {attempt + 1}/{self.max_retries})",
            extra={
                "url": url,
                "status_code": status_code,
                "error_body": error_body[:500]
            }
        )

        # Client errors other than rate limiting are not retried
        if 400 <= status_code < 500 and status_code != 429:
            raise APIClientError(f"API Client Error {status_code}: {error_body[:500]}") from error

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APIClientError(f"API HTTP Error {status_code}") from error

    async def _handle_timeout_error(self, error: TimeoutException, attempt: int, url: str):
        self.logger.warning(
            f"API Timeout (Attempt {attempt + 1}/{self.max_retries})",
            extra={"url": url}
        )

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APITimeoutError(f"API Timeout after {self.max_retries} attempts") from error

    async def _handle_generic_error(self, error: Exception, attempt: int, url: str):
        self.logger.warning(
            f"API Generic Error (Attempt {attempt + 1}/{self.max_retries})",
            extra={"url": url, "error": str(error)}
        )

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APIClientError(f"API Error: {str(error)}") from error

    async def _wait_before_retry(self, attempt: int):
        """Exponential backoff wait."""
        wait_time = self.retry_delay * (2 ** attempt)
        await asyncio.sleep(wait_time)


class GeminiClient:
    """Wrapper for the Google Gemini API client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timeout: float = 60,
        max_retries: int = 1,
    ):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name to use
            timeout: Request timeout in seconds
            max_retries: Total number of attempts
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_retries = max(1, max_retries)

        try:
            self.client = genai.Client(api_key=self.api_key)
            LOGGER.info(f"Initialized Gemini client with model {self.model}")
        except Exception as e:
            LOGGER.error(f"Failed to initialize Gemini client: {e}")
            raise APIClientError(f"Failed to initialize Gemini client: {e}", original_error=e)

    def _build_config(
        self,
        system_instruction: Optional[str],
        generation_config: Optional[Dict[str, Any]],
    ) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(temperature=0.0)

        if generation_config:
            if "temperature" in generation_config:
                config.temperature = generation_config["temperature"]
            if "max_output_tokens" in generation_config:
                config.max_output_tokens = generation_config["max_output_tokens"]
            if "response_mime_type" in generation_config:
                config.response_mime_type = generation_config["response_mime_type"]
            if "response_schema" in generation_config:
                config.response_schema = generation_config["response_schema"]

        if system_instruction:
            config.system_instruction = system_instruction

        return config

    async def generate_content(
        self,
        contents: Union[str, List[Union[str, Dict[str, Any]]]],
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate content using the Gemini model.

        Args:
            contents: Input content (string or list of parts)
            system_instruction: Optional system instruction
            generation_config: Optional generation config (temperature, etc.)

        Returns:
            Generated text response

        Raises:
            APIClientError: If generation fails
        """
        config = self._build_config(system_instruction, generation_config)

        for attempt in range(self.max_retries):
            try:
                response = await self.client.aio.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config
                )

                if not response.text:
                    LOGGER.warning("Empty response from Gemini")
                    return ""

                return response.text

            except Exception as e:
                LOGGER.warning(
                    f"Gemini API error (Attempt {attempt + 1}/{self.max_retries}): {e}"
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(2 ** attempt)
                else:
                    raise APIClientError(f"Gemini generation failed: {e}", original_error=e) from e

        raise APIClientError("Gemini generation failed")


def to_json_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Convert an OpenAPI-style Gemini schema to plain JSON Schema.

    Upper-case type names become lower-case and ``nullable`` becomes a
    ``[type, "null"]`` union.
    """
    converted: Dict[str, Any] = {}
    for key, value in schema.items():
        if key == "nullable":
            continue
        if key == "type":
            json_type = value.lower()
            converted["type"] = [json_type, "null"] if schema.get("nullable") else json_type
        elif key == "properties":
            converted["properties"] = {name: to_json_schema(sub) for name, sub in value.items()}
        elif key == "items":
            converted["items"] = to_json_schema(value)
        else:
            converted[key] = value
    return converted


class OpenRouterClient:
    """Wrapper for the OpenRouter chat completions API.

    Exposes the same ``generate_content`` interface as ``GeminiClient``.
    """

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60,
        max_retries: int = 1,
    ):
        """Initialize OpenRouter client.

        Args:
            api_key: OpenRouter API key
            model: Model name to use
            base_url: OpenRouter chat completions URL
            timeout: Request timeout in seconds
            max_retries: Total number of attempts
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries

        self.client = BaseLLMClient(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries
        )

        LOGGER.info(f"Initialized OpenRouter client with model {self.model}")

    def _build_payload(
        self,
        contents: Union[str, List[Union[str, Dict[str, Any]]]],
        system_instruction: Optional[str],
        generation_config: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        messages = []

        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})

        if isinstance(contents, str):
            user_content = contents
        else:
            user_content = ""
            for part in contents:
                if isinstance(part, str):
                    user_content += part
                elif isinstance(part, dict) and "text" in part:
                    user_content += part["text"]
        messages.append({"role": "user", "content": user_content})

        payload: Dict[str, Any] = {"model": self.model, "messages": messages, "temperature": 0.0}

        if generation_config:
            if "temperature" in generation_config:
                payload["temperature"] = generation_config["temperature"]
            if "max_output_tokens" in generation_config:
                payload["max_tokens"] = generation_config["max_output_tokens"]
            if "response_schema" in generation_config:
                payload["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {
                        "name": "response",
                        "strict": False,
                        "schema": to_json_schema(generation_config["response_schema"]),
                    },
                }
            elif generation_config.get("response_mime_type") == "application/json":
                payload["response_format"] = {"type": "json_object"}

        return payload

    async def generate_content(
        self,
        contents: Union[str, List[Union[str, Dict[str, Any]]]],
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate content using the OpenRouter model.

        Raises:
            APIClientError: If the request fails or the response has no choices
            APITimeoutError: If the request times out
        """
        payload = self._build_payload(contents, system_instruction, generation_config)

        response = await self.client.call_api(payload=payload)

        choices = response.get("choices") if isinstance(response, dict) else None
        if not choices:
            LOGGER.error(f"Unexpected OpenRouter response format: {str(response)[:500]}")
            raise APIClientError("Invalid response format from OpenRouter")

        content = choices[0].get("message", {}).get("content") or ""
        if not content:
            LOGGER.warning("Empty response from OpenRouter")
        return content
