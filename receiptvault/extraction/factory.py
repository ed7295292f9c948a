from typing import ClassVar

import httpx

from receiptvault.config.settings import Settings
from receiptvault.extraction.azure_extractor import AzureFieldExtractor
from receiptvault.extraction.backoff import PollSchedule, SubmitRetryPolicy
from receiptvault.extraction.base import BaseFieldExtractor
from receiptvault.extraction.example_extractor import ExampleFieldExtractor
from receiptvault.extraction.llm_extractor import LlmFieldExtractor
from receiptvault.extraction.openai_client_adapter import OpenAIVisionClientAdapter


class ExtractorFactory:
    """Creates the configured field extractor adapter."""

    PROVIDERS: ClassVar[tuple[str, ...]] = ("azure", "openai", "example")

    @classmethod
    def create(
        cls,
        settings: Settings,
        http_client: httpx.Client | None = None,
    ) -> BaseFieldExtractor:
        """Create a field extractor from application settings."""
        provider = settings.extraction_provider.lower()
        if provider == "example":
            return ExampleFieldExtractor()
        if provider == "openai":
            return LlmFieldExtractor(
                client=OpenAIVisionClientAdapter(
                    api_key=settings.openai_api_key,
                    timeout_seconds=settings.openai_timeout_seconds,
                    base_url=settings.openai_base_url,
                ),
                model=settings.openai_model_name,
                currency_symbol=settings.currency_symbol,
            )
        if provider == "azure":
            if not settings.azure_endpoint.strip():
                raise ValueError("azure_endpoint is required for extraction_provider=azure")
            return AzureFieldExtractor(
                http_client=http_client or httpx.Client(),
                endpoint=settings.azure_endpoint,
                api_key=settings.azure_api_key,
                model_id=settings.azure_model_id,
                api_version=settings.azure_api_version,
                currency_symbol=settings.currency_symbol,
                retry_policy=SubmitRetryPolicy(attempts=settings.extraction_submit_attempts),
                poll_schedule=PollSchedule(
                    initial_interval=settings.extraction_poll_initial_interval_seconds,
                    growth_factor=settings.extraction_poll_growth_factor,
                    max_interval=settings.extraction_poll_max_interval_seconds,
                    timeout=settings.extraction_poll_timeout_seconds,
                ),
                submit_timeout_seconds=settings.extraction_submit_timeout_seconds,
                poll_request_timeout_seconds=settings.extraction_poll_request_timeout_seconds,
            )
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
