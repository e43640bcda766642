"""
PDF document extractor using PyMuPDF.

Produces page-tagged text: each page becomes a line starting with
a `[P<n>] ` marker so the model can map answers back to pages.
"""

import re
from typing import ClassVar

import fitz  # PyMuPDF

from anatomy_guru.extractors.base import DocumentExtractor, ExtractionError
from anatomy_guru.models import PDF_MIME_TYPE, UploadedFile

_WHITESPACE = re.compile(r"\s+")


class PDFExtractor(DocumentExtractor):
    """
    Extracts text content from PDF files.

    Scanned (image-only) PDFs yield little or no text; deciding what to
    do with that is left to the caller.
    """

    SUPPORTED_EXTENSIONS: ClassVar[tuple[str, ...]] = (".pdf",)
    SUPPORTED_MIME_TYPES: ClassVar[tuple[str, ...]] = (PDF_MIME_TYPE,)

    def extract(self, upload: UploadedFile) -> str:
        """
        Extract page-tagged text from a PDF file.

        Args:
            upload: The uploaded PDF file.

        Returns:
            One `[P<n>] <text>` line per page, in page order.

        Raises:
            ExtractionError: If the PDF cannot be opened or has no pages.
        """
        self._validate_upload(upload)

        try:
            text_parts: list[str] = []

            with fitz.open(stream=upload.data, filetype="pdf") as doc:
                if doc.page_count == 0:
                    raise ExtractionError("PDF has no pages", upload.name)

                for page_num, page in enumerate(doc, start=1):
                    page_text = _WHITESPACE.sub(" ", page.get_text("text")).strip()
                    text_parts.append(f"[P{page_num}] {page_text}\n")

            return "".join(text_parts)

        except fitz.FileDataError as e:
            raise ExtractionError("PDF file is corrupted or invalid", upload.name, cause=e) from e
        except fitz.EmptyFileError as e:
            raise ExtractionError("PDF file is empty", upload.name, cause=e) from e
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"Unexpected error: {e}", upload.name, cause=e) from e
