"""
Download a stored contract file and pull plain text out of it.

Supports PDF (pypdf, with pdfplumber as a fallback for files without a usable
text layer) and DOCX (python-docx). Legacy DOC is recognised so callers get a
clear UnsupportedFormatError instead of a parser crash.
"""
import enum
import logging
import os
import re
import tempfile
from pathlib import Path
from urllib.parse import parse_qs, unquote, urlparse

import docx
import httpx
import pdfplumber
from pypdf import PdfReader

from app.core.config import Settings
from app.core.exceptions import ExtractionError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PAGE_MARKER_PATTERN = re.compile(r"Page \d+ of \d+", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")


class DocumentFormat(str, enum.Enum):
    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"


def detect_format(file_url: str) -> DocumentFormat | None:
    """
    Work out the file format from a URL.

    Checks, in order: the URL suffix, the last path segment (storage URLs often
    carry query strings or encoded paths), and a ``contentType`` query parameter.
    """
    lower_url = file_url.lower()
    for fmt in (DocumentFormat.PDF, DocumentFormat.DOCX, DocumentFormat.DOC):
        if lower_url.endswith(f".{fmt.value}"):
            return fmt

    parsed = urlparse(file_url)
    last_segment = unquote(parsed.path).rsplit("/", 1)[-1].lower()
    # .docx has to be checked before .doc, which it contains
    for fmt in (DocumentFormat.PDF, DocumentFormat.DOCX, DocumentFormat.DOC):
        if f".{fmt.value}" in last_segment:
            return fmt

    content_types = parse_qs(parsed.query).get("contentType")
    if content_types:
        content_type = content_types[0].lower()
        if "pdf" in content_type:
            return DocumentFormat.PDF
        if "docx" in content_type or "document" in content_type:
            return DocumentFormat.DOCX
        if "msword" in content_type:
            return DocumentFormat.DOC

    return None


def clean_text(text: str) -> str:
    """Normalize extracted text; the steps run in this order."""
    cleaned = WHITESPACE_PATTERN.sub(" ", text)
    cleaned = PAGE_MARKER_PATTERN.sub("", cleaned)
    cleaned = cleaned.replace("\f", "\n")
    cleaned = cleaned.replace("\r\n", "\n")
    return cleaned.strip()


def count_tokens(text: str) -> int:
    """Whitespace token count reported alongside extracted text."""
    return len(text.split()) if text else 0


class TextExtractor:
    """Downloads files over HTTP and extracts their text."""

    def __init__(
        self,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "TextExtractor":
        return cls(timeout=settings.DOWNLOAD_TIMEOUT_SECONDS)

    async def extract(self, file_url: str, declared_type: str | None = None) -> str:
        """
        Extract cleaned text from the file at ``file_url``.

        Raises:
            UnsupportedFormatError: format unknown or without an extractor
            ExtractionError: download or parsing failed
        """
        fmt = detect_format(file_url)
        if fmt is None:
            raise UnsupportedFormatError(f"Unsupported file type for {file_url}")
        if declared_type and fmt.value not in declared_type.lower():
            logger.info("Declared type %s differs from detected format %s", declared_type, fmt.value)
        if fmt is DocumentFormat.DOC:
            raise UnsupportedFormatError("Extraction for doc files is not supported")

        with tempfile.NamedTemporaryFile(delete=False, suffix=f".{fmt.value}") as tmp_file:
            tmp_file_path = tmp_file.name

        try:
            await self._download(file_url, tmp_file_path)
            if fmt is DocumentFormat.PDF:
                raw_text = self._extract_pdf(tmp_file_path)
            else:
                raw_text = self._extract_docx(tmp_file_path)
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Text extraction failed for {file_url}: {e}", exc_info=True)
            raise ExtractionError(f"Failed to extract text from document: {e}") from e
        finally:
            # Clean up temp file
            if os.path.exists(tmp_file_path):
                os.unlink(tmp_file_path)

        text = clean_text(raw_text)
        logger.info(f"Extracted {len(text)} chars ({fmt.value}) from {file_url}")
        return text

    async def _download(self, file_url: str, destination: str) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport, follow_redirects=True
            ) as client:
                async with client.stream("GET", file_url) as response:
                    if response.status_code != 200:
                        raise ExtractionError(
                            f"Failed to download file: {response.status_code}"
                        )
                    with open(destination, "wb") as out:
                        async for chunk in response.aiter_bytes():
                            out.write(chunk)
        except httpx.HTTPError as e:
            raise ExtractionError(f"Failed to download file: {e}") from e

    @staticmethod
    def _extract_pdf(path: str) -> str:
        reader = PdfReader(path)
        if reader.is_encrypted:
            raise ExtractionError(
                "PDF is encrypted. Please provide an unencrypted version of the document."
            )

        text = "\n".join(page.extract_text() or "" for page in reader.pages)
        if text.strip():
            return text

        logger.info("pypdf found no text layer in %s, trying pdfplumber", Path(path).name)
        with pdfplumber.open(path) as pdf:
            return "\n".join(page.extract_text() or "" for page in pdf.pages)

    @staticmethod
    def _extract_docx(path: str) -> str:
        document = docx.Document(path)
        parts = [para.text for para in document.paragraphs if para.text]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))
        return "\n".join(parts)
