from receiptvault.extraction.base import BaseFieldExtractor
from receiptvault.extraction.factory import ExtractorFactory
from receiptvault.extraction.models import ExtractionResult

__all__ = ["BaseFieldExtractor", "ExtractionResult", "ExtractorFactory"]
