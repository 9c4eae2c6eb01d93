"""Gemini generation client wrapper with error handling."""
from typing import Any, Dict, List, Optional

import httpx
import structlog

from asklky import config
from asklky.errors import ResponseParseError, TransportError

logger = structlog.get_logger()

NO_RESPONSE_TEXT = "No response found."
MODEL_PAGE_SIZE = 1000


def _extract_text(data: Any) -> Optional[str]:
    """Pull candidates[0].content.parts[0].text out of a response body."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text:
        return None
    return text


class GenerationClient:
    """Async client for the Gemini generateContent API."""

    def __init__(
        self,
        base_url: str = None,
        model: str = None,
        api_key: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the generation client.

        Args:
            base_url: API base URL (defaults to config.GEMINI_BASE_URL)
            model: Model name (defaults to config.GENERATION_MODEL)
            api_key: API key sent as the 'key' query parameter, if any
            timeout: Request timeout in seconds (defaults to config.GENERATION_TIMEOUT)
            transport: Custom httpx transport, mainly for tests
        """
        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip("/")
        self.model = model or config.GENERATION_MODEL
        self.api_key = config.GEMINI_API_KEY if api_key is None else api_key
        self.timeout = timeout or config.GENERATION_TIMEOUT
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _params(self) -> Dict[str, str]:
        return {"key": self.api_key} if self.api_key else {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    @staticmethod
    def build_payload(prompt: str) -> Dict[str, Any]:
        """Request body carrying the prompt as the single user turn."""
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": config.GENERATION_TEMPERATURE},
        }

    async def generate(self, prompt: str) -> str:
        """Send one generateContent request and return the reply text.

        A body that parses as JSON but lacks the expected candidate text
        yields NO_RESPONSE_TEXT instead of an error.

        Args:
            prompt: Fully augmented prompt

        Returns:
            Generated text, or NO_RESPONSE_TEXT

        Raises:
            TransportError: On network failure, timeout or non-success status
            ResponseParseError: If the response body is not JSON
        """
        try:
            async with self._client() as client:
                logger.info(
                    "generation_request",
                    model=self.model,
                    prompt_length=len(prompt),
                )

                response = await client.post(
                    self.endpoint,
                    params=self._params(),
                    json=self.build_payload(prompt),
                )
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                "generation_http_error",
                status_code=status_code,
                reason=e.response.reason_phrase,
                body_preview=e.response.text[:200],
            )
            raise TransportError(
                f"API error: {status_code} {e.response.reason_phrase}",
                status_code=status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "generation_connection_error",
                error=str(e),
                error_type=type(e).__name__,
                base_url=self.base_url,
            )
            raise TransportError(f"{type(e).__name__}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                "generation_parse_error",
                error=str(e),
                body_preview=response.text[:200],
            )
            raise ResponseParseError(
                f"Response body is not JSON: {e}", status_code=response.status_code
            ) from e

        text = _extract_text(data)
        if text is None:
            logger.warning("generation_empty_response", model=self.model)
            return NO_RESPONSE_TEXT

        logger.info(
            "generation_response",
            model=self.model,
            response_length=len(text),
        )
        return text

    async def list_models(self) -> List[str]:
        """List model names visible to the configured key.

        Follows nextPageToken until the listing is exhausted.

        Returns:
            List of model names

        Raises:
            TransportError: On network failure or non-success status
        """
        names: List[str] = []
        params = {**self._params(), "pageSize": MODEL_PAGE_SIZE}

        try:
            async with self._client() as client:
                while True:
                    response = await client.get(f"{self.base_url}/models", params=params)
                    response.raise_for_status()
                    data = response.json()

                    if not isinstance(data, dict):
                        break
                    names.extend(
                        m.get("name", "") for m in (data.get("models") or []) if isinstance(m, dict)
                    )

                    page_token = data.get("nextPageToken")
                    if not page_token:
                        break
                    params["pageToken"] = page_token

        except (httpx.HTTPError, ValueError) as e:
            logger.error("generation_list_models_error", error=str(e))
            raise TransportError(f"Could not list models: {e}") from e

        return names


# Global client instance
generation_client = GenerationClient()
