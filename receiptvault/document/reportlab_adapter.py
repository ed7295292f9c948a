import io

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from receiptvault.document.base import BaseDocumentBuilder
from receiptvault.document.exceptions import DocumentBuildError
from receiptvault.domain.models import ReceiptDocument, ReceiptImage


class ReportLabBuilder(BaseDocumentBuilder):
    """Builds the receipt PDF with ReportLab."""

    def build(self, image: ReceiptImage) -> ReceiptDocument:
        try:
            buf = io.BytesIO()
            page_size = (image.width, image.height)
            c = canvas.Canvas(buf, pagesize=page_size)
            c.drawImage(
                ImageReader(io.BytesIO(image.data)),
                0,
                0,
                width=image.width,
                height=image.height,
            )
            c.showPage()
            c.save()
        except Exception as exc:
            raise DocumentBuildError(f"reportlab rendering failed: {exc}") from exc
        return ReceiptDocument(data=buf.getvalue())
