"""
Document normalizer.

Turns any uploaded file into a NormalizedDocument: extracted text for
Word documents and text-bearing PDFs, a base64 payload for images and
for PDFs whose text layer is missing or too thin (e.g. scans).
"""

import base64
import logging
from typing import Callable

from anatomy_guru.config import Settings, get_settings
from anatomy_guru.extractors.base import ExtractionError
from anatomy_guru.extractors.docx_extractor import DocxExtractor
from anatomy_guru.extractors.pdf_extractor import PDFExtractor
from anatomy_guru.models import BinaryDocument, NormalizedDocument, TextDocument, UploadedFile

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class DocumentNormalizer:
    """
    Converts uploads into the text-or-binary form sent to the model.

    Word documents always become text; parser failures are fatal.
    PDF extraction failures are never fatal: the file is sent as a
    binary payload instead.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the normalizer.

        Args:
            settings: Configuration settings. Uses global settings if not provided.
        """
        self._settings = settings or get_settings()
        self._docx_extractor = DocxExtractor()
        self._pdf_extractor = PDFExtractor()

    def normalize(
        self,
        upload: UploadedFile,
        on_progress: ProgressCallback | None = None,
    ) -> NormalizedDocument:
        """
        Normalize one uploaded file.

        Args:
            upload: The uploaded file.
            on_progress: Optional callback receiving a label for each step.

        Returns:
            A TextDocument or a BinaryDocument.

        Raises:
            ExtractionError: If the file is empty, too large, or is a
                Word document that cannot be parsed.
        """
        self._check_size(upload)
        report = on_progress or (lambda label: None)

        if upload.is_docx:
            report(f"Parsing DOCX: {upload.name}")
            text = self._docx_extractor.extract(upload)
            return TextDocument(name=upload.name, text=text)

        if upload.is_pdf:
            report(f"Extracting PDF: {upload.name}")
            text = self._try_pdf_text(upload)
            if text is not None:
                return TextDocument(name=upload.name, text=text)

        report(f"Encoding Visual Data: {upload.name}")
        return self._encode(upload)

    def _try_pdf_text(self, upload: UploadedFile) -> str | None:
        """Return the PDF's page-tagged text if it is long enough, else None."""
        try:
            text = self._pdf_extractor.extract(upload)
        except ExtractionError as e:
            logger.warning("PDF text extraction failed, sending as binary: %s", e)
            return None

        length = len(text.strip())
        if length > self._settings.min_pdf_text_length:
            return text

        logger.info(
            "PDF '%s' yielded only %d characters of text, sending as binary",
            upload.name,
            length,
        )
        return None

    def _encode(self, upload: UploadedFile) -> BinaryDocument:
        return BinaryDocument(
            name=upload.name,
            mime_type=upload.resolved_mime_type(),
            data=base64.b64encode(upload.data).decode("ascii"),
        )

    def _check_size(self, upload: UploadedFile) -> None:
        if upload.size_bytes == 0:
            raise ExtractionError("File is empty", upload.name)

        if upload.size_bytes > self._settings.max_file_size_bytes:
            raise ExtractionError(
                f"File is {upload.size_bytes / (1024 * 1024):.1f} MB, "
                f"limit is {self._settings.max_file_size_mb} MB",
                upload.name,
            )
