import asyncio
from typing import Any, Dict, List, Optional, Union

from google import genai
from google.genai import types

from app.core.exceptions import APIClientError, ConfigurationError
from app.utils.json_parser import parse_json_safely
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

Contents = Union[str, List[Union[str, types.Part]]]


class GeminiClient:
    """Wrapper for Google Gemini API client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timeout: int = 60,
        max_retries: int = 2,
        client: Optional[genai.Client] = None,
    ):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name to use
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts
            client: Pre-built SDK client (tests inject a mock here)
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")
        try:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=self.timeout * 1000),
            )
            LOGGER.info(f"Initialized Gemini client with model {self.model}")
        except Exception as e:
            LOGGER.error(f"Failed to initialize Gemini client: {e}")
            raise APIClientError(f"Failed to initialize Gemini client: {e}", original_error=e)
        return self._client

    @staticmethod
    def image_part(data: bytes, mime_type: str) -> types.Part:
        """Build an inline image part."""
        return types.Part.from_bytes(data=data, mime_type=mime_type or "image/jpeg")

    async def generate_content(
        self,
        contents: Contents,
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate content using Gemini model.

        Args:
            contents: Prompt text, or a list of text and image parts
            system_instruction: Optional system instruction
            generation_config: Optional overrides (temperature,
                response_mime_type, response_schema, max_output_tokens)

        Returns:
            Generated text response

        Raises:
            ConfigurationError: If no API key is configured
            APIClientError: If generation fails after retries
        """
        client = self._get_client()

        config = types.GenerateContentConfig(temperature=0.0)
        if generation_config:
            for key in ("temperature", "max_output_tokens", "response_mime_type", "response_schema"):
                if key in generation_config:
                    setattr(config, key, generation_config[key])
        if system_instruction:
            config.system_instruction = system_instruction

        for attempt in range(self.max_retries):
            try:
                response = await client.aio.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config,
                )
                if not response.text:
                    LOGGER.warning("Empty response from Gemini", extra={"model": self.model})
                    return ""
                return response.text

            except Exception as e:
                LOGGER.warning(
                    f"Gemini API error (Attempt {attempt + 1}/{self.max_retries}): {e}"
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(2 ** attempt)
                else:
                    raise APIClientError(f"Gemini generation failed: {e}", original_error=e)

        raise APIClientError("Gemini generation failed")

    async def generate_json(
        self,
        contents: Contents,
        response_schema: Optional[Dict[str, Any]] = None,
        system_instruction: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Generate a JSON object constrained by ``response_schema``.

        Raises:
            APIClientError: If generation fails or the reply is not a JSON object
        """
        generation_config: Dict[str, Any] = {"response_mime_type": "application/json"}
        if response_schema:
            generation_config["response_schema"] = response_schema

        text = await self.generate_content(
            contents=contents,
            system_instruction=system_instruction,
            generation_config=generation_config,
        )
        parsed = parse_json_safely(text)
        if not isinstance(parsed, dict):
            raise APIClientError(f"Gemini response is not a JSON object: {text[:200]!r}")
        return parsed
