"""
Microsoft Word document extractor using python-docx.

Extracts raw text from .docx files (modern Word format), walking the
document body in order so that tables stay where the faculty put them.
"""

import io
from typing import ClassVar

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table
from docx.text.paragraph import Paragraph

from anatomy_guru.extractors.base import DocumentExtractor, ExtractionError
from anatomy_guru.models import DOCX_MIME_TYPE, UploadedFile


class DocxExtractor(DocumentExtractor):
    """
    Extracts text content from Word documents (.docx).

    Body content is emitted in document order:
    - Paragraphs as they are
    - Tables as one line per row, cells joined with ' | '
    """

    SUPPORTED_EXTENSIONS: ClassVar[tuple[str, ...]] = (".docx",)
    SUPPORTED_MIME_TYPES: ClassVar[tuple[str, ...]] = (DOCX_MIME_TYPE,)

    def extract(self, upload: UploadedFile) -> str:
        """
        Extract text from a Word document.

        Args:
            upload: The uploaded .docx file.

        Returns:
            The document text, blocks separated by blank lines.

        Raises:
            ExtractionError: If the document cannot be read or has no text.
        """
        self._validate_upload(upload)

        try:
            doc = Document(io.BytesIO(upload.data))
            blocks = [self._block_text(block) for block in doc.iter_inner_content()]
        except PackageNotFoundError as e:
            raise ExtractionError(
                "File is not a valid .docx document or is corrupted", upload.name, cause=e
            ) from e
        except Exception as e:
            raise ExtractionError(f"Unexpected error: {e}", upload.name, cause=e) from e

        text = "\n\n".join(block for block in blocks if block)
        if not text.strip():
            raise ExtractionError("Document contains no extractable text", upload.name)

        return text

    def _block_text(self, block: Paragraph | Table) -> str:
        if isinstance(block, Table):
            return self._table_text(block)
        return block.text if block.text.strip() else ""

    def _table_text(self, table: Table) -> str:
        """Convert a Word table to text, skipping empty rows."""
        rows: list[str] = []

        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                rows.append(" | ".join(cells))

        return "\n".join(rows)
