from abc import ABC, abstractmethod


class BaseVisionClient(ABC):
    """Contract for provider-specific multimodal completion clients."""

    @abstractmethod
    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        image_data_url: str,
    ) -> str:
        """Return the provider's reply to ``prompt`` about the image as plain text."""
