"""Field extraction from document photos.

- DocumentExtractionService: title deed and ID card fields via a vision model
"""

from app.services.extraction.document_extraction_service import DocumentExtractionService

__all__ = ["DocumentExtractionService"]
