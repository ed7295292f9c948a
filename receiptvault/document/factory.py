from receiptvault.config.settings import Settings
from receiptvault.document.base import BaseDocumentBuilder
from receiptvault.document.pymupdf_adapter import PyMuPdfBuilder
from receiptvault.document.reportlab_adapter import ReportLabBuilder


class DocumentBuilderFactory:
    """Creates the PDF builder selected by ``document_engine``."""

    ADAPTERS: dict[str, type[BaseDocumentBuilder]] = {
        "pymupdf": PyMuPdfBuilder,
        "reportlab": ReportLabBuilder,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseDocumentBuilder:
        engine = settings.document_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown document engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
