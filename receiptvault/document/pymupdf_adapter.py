import pymupdf

from receiptvault.document.base import BaseDocumentBuilder
from receiptvault.document.exceptions import DocumentBuildError
from receiptvault.domain.models import ReceiptDocument, ReceiptImage


class PyMuPdfBuilder(BaseDocumentBuilder):
    """Builds the receipt PDF with PyMuPDF."""

    def build(self, image: ReceiptImage) -> ReceiptDocument:
        try:
            with pymupdf.open() as doc:  # type: ignore[no-untyped-call]
                page = doc.new_page(width=image.width, height=image.height)
                page.insert_image(page.rect, stream=image.data, keep_proportion=False)
                data = doc.tobytes(garbage=3, deflate=True)
        except Exception as exc:
            raise DocumentBuildError(f"pymupdf rendering failed: {exc}") from exc
        return ReceiptDocument(data=data)
