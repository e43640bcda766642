"""
Document Normalization Module.

Converts uploaded files into the form sent to the model:
- Word (.docx): extracted text
- PDF (.pdf): page-tagged text, or a binary payload for scanned PDFs
- Images and anything else: a base64 binary payload
"""

from anatomy_guru.extractors.base import DocumentExtractor, ExtractionError
from anatomy_guru.extractors.normalizer import DocumentNormalizer

__all__ = [
    "DocumentExtractor",
    "DocumentNormalizer",
    "ExtractionError",
]
