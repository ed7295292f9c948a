from abc import ABC, abstractmethod

from receiptvault.domain.models import ReceiptImage
from receiptvault.extraction.models import ExtractionResult


class BaseFieldExtractor(ABC):
    """Contract for all receipt field-extraction adapters."""

    @abstractmethod
    def extract(self, image: ReceiptImage) -> ExtractionResult:
        """Extract structured receipt fields from an image.

        Args:
            image: The scanned receipt page.

        Returns:
            ExtractionResult whose ``fields`` hold every schema key
            (absent values are empty strings) and whose ``date`` is always
            populated, falling back to the current date.

        Raises:
            ExtractionError: on any failure.
        """
