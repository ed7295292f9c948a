from abc import ABC, abstractmethod

from receiptvault.domain.models import ReceiptDocument, ReceiptImage


class BaseDocumentBuilder(ABC):
    """Contract for all receipt-to-PDF adapters."""

    @abstractmethod
    def build(self, image: ReceiptImage) -> ReceiptDocument:
        """Render a single-page PDF embedding the image at native resolution.

        Raises:
            DocumentBuildError: if rendering fails for any reason.
        """
