"""
Base classes for document text extraction.

Defines the abstract interface that all extractors must implement,
ensuring consistent behavior across different file formats.
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from anatomy_guru.models import UploadedFile


class ExtractionError(Exception):
    """
    Raised when a document cannot be read.

    Contains detailed information about the failure cause.
    """

    def __init__(self, message: str, file_name: str, cause: Exception | None = None):
        self.file_name = file_name
        self.cause = cause
        super().__init__(f"Failed to read '{file_name}': {message}")


class DocumentExtractor(ABC):
    """
    Abstract base class for text extractors.

    Extractors work on in-memory uploads and declare the file extensions
    and MIME types they handle.
    """

    SUPPORTED_EXTENSIONS: ClassVar[tuple[str, ...]] = ()
    SUPPORTED_MIME_TYPES: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def supports(cls, upload: UploadedFile) -> bool:
        """
        Check if this extractor handles the given upload.

        Args:
            upload: The uploaded file to check.

        Returns:
            True if the extension or MIME type matches.
        """
        return (
            upload.extension in cls.SUPPORTED_EXTENSIONS
            or upload.mime_type in cls.SUPPORTED_MIME_TYPES
        )

    @abstractmethod
    def extract(self, upload: UploadedFile) -> str:
        """
        Extract text content from the document.

        Args:
            upload: The uploaded file.

        Returns:
            The extracted text.

        Raises:
            ExtractionError: If extraction fails for any reason.
        """
        ...

    def _validate_upload(self, upload: UploadedFile) -> None:
        """
        Validate that the upload has content and is supported.

        Raises:
            ExtractionError: If the file is empty or isn't supported.
        """
        if not upload.data:
            raise ExtractionError("File is empty", upload.name)

        if not self.supports(upload):
            raise ExtractionError(
                f"Unsupported file format. Expected one of: {self.SUPPORTED_EXTENSIONS}",
                upload.name,
            )
