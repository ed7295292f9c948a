import httpx
import openai

from receiptvault.extraction.client_base import BaseVisionClient
from receiptvault.extraction.exceptions import (
    AuthenticationError,
    ExtractionFailedError,
    InvalidResponseError,
)


class OpenAIVisionClientAdapter(BaseVisionClient):
    """Vision completion client built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        image_data_url: str,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={"type": "json_object"},
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": image_data_url}},
                        ],
                    },
                ],
            )
        except openai.AuthenticationError as exc:
            raise AuthenticationError(f"Vision provider rejected the API key: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionFailedError(f"Vision provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ExtractionFailedError(f"Vision provider API error: {exc}") from exc

        if not response.choices:
            raise InvalidResponseError("Vision provider returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise InvalidResponseError("Vision provider returned an empty response")
        return content
