"""
Test suite for downloading and extracting contract text.

Tests cover:
- Format detection from URLs
- Text normalization
- Unsupported formats
- DOCX and PDF extraction over a mocked download
- The pdfplumber fallback and encrypted PDFs
- Download failures and temp file cleanup
"""
import io
import os

import docx
import httpx
import pytest
from pypdf import PdfWriter

from app.core.exceptions import ExtractionError, UnsupportedFormatError
from app.services import text_extractor
from app.services.text_extractor import (
    DocumentFormat,
    TextExtractor,
    clean_text,
    count_tokens,
    detect_format,
)


def _docx_bytes(*paragraphs: str) -> bytes:
    document = docx.Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _serving(content: bytes, status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=content)

    return httpx.MockTransport(handler)


def _unreachable() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"Unexpected download of {request.url}")

    return httpx.MockTransport(handler)


class _FakePage:
    def __init__(self, text):
        self.text = text

    def extract_text(self):
        return self.text


class _FakePdfReader:
    def __init__(self, pages_text, encrypted=False):
        self.is_encrypted = encrypted
        self.pages = [_FakePage(text) for text in pages_text]


class _FakePlumberPdf:
    def __init__(self, pages_text):
        self.pages = [_FakePage(text) for text in pages_text]

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


def _fake_pdf_reader(monkeypatch, pages_text, encrypted=False):
    opened = []

    def fake_reader(path):
        opened.append(path)
        return _FakePdfReader(pages_text, encrypted)

    monkeypatch.setattr(text_extractor, "PdfReader", fake_reader)
    return opened


def _fake_pdfplumber(monkeypatch, pages_text):
    opened = []

    def fake_open(path):
        opened.append(path)
        return _FakePlumberPdf(pages_text)

    monkeypatch.setattr(text_extractor.pdfplumber, "open", fake_open)
    return opened


class TestDetectFormat:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://storage.example.com/bucket/contract.pdf", DocumentFormat.PDF),
            ("https://storage.example.com/bucket/CONTRACT.PDF", DocumentFormat.PDF),
            ("https://storage.example.com/bucket/contract.docx", DocumentFormat.DOCX),
            ("https://storage.example.com/bucket/legacy.doc", DocumentFormat.DOC),
        ],
    )
    def test_suffix(self, url, expected):
        assert detect_format(url) is expected

    def test_encoded_path_with_query_string(self):
        url = (
            "https://firebasestorage.googleapis.com/v0/b/app.appspot.com/o/"
            "contracts%2Flease.docx?alt=media&token=abc123"
        )
        assert detect_format(url) is DocumentFormat.DOCX

    def test_docx_is_not_mistaken_for_doc(self):
        assert detect_format("https://example.com/files/nda.docx?v=2") is DocumentFormat.DOCX

    @pytest.mark.parametrize(
        "content_type, expected",
        [
            ("application%2Fpdf", DocumentFormat.PDF),
            (
                "application%2Fvnd.openxmlformats-officedocument.wordprocessingml.document",
                DocumentFormat.DOCX,
            ),
            ("application%2Fmsword", DocumentFormat.DOC),
        ],
    )
    def test_content_type_query_parameter(self, content_type, expected):
        url = f"https://storage.example.com/o/blob-123?contentType={content_type}"
        assert detect_format(url) is expected

    def test_unknown(self):
        assert detect_format("https://storage.example.com/notes.txt") is None


class TestCleanText:
    def test_collapses_whitespace_and_strips(self):
        assert clean_text("  Hello \n\n  world\t ") == "Hello world"

    def test_removes_page_markers(self):
        text = "Page 1 of 3\nTerm and Termination\nPAGE 2 OF 3\nGoverning Law"
        assert clean_text(text) == "Term and Termination  Governing Law"

    def test_empty(self):
        assert clean_text("") == ""

    def test_count_tokens(self):
        assert count_tokens("one two  three") == 3
        assert count_tokens("") == 0


class TestExtract:
    @pytest.mark.asyncio
    async def test_unknown_format_is_rejected_before_download(self):
        extractor = TextExtractor(transport=_unreachable())

        with pytest.raises(UnsupportedFormatError):
            await extractor.extract("https://storage.example.com/notes.txt")

    @pytest.mark.asyncio
    async def test_doc_is_unsupported(self):
        extractor = TextExtractor(transport=_unreachable())

        with pytest.raises(UnsupportedFormatError) as exc_info:
            await extractor.extract("https://storage.example.com/legacy.doc", "application/msword")

        assert exc_info.value.status_code == 415

    @pytest.mark.asyncio
    async def test_docx_text_is_extracted_and_cleaned(self):
        content = _docx_bytes(
            "Master Services Agreement",
            "This Agreement is made between Acme and Globex.",
            "Page 2 of 5",
        )
        extractor = TextExtractor(transport=_serving(content))

        text = await extractor.extract("https://storage.example.com/msa.docx", "docx")

        assert text == "Master Services Agreement This Agreement is made between Acme and Globex."

    @pytest.mark.asyncio
    async def test_docx_tables_are_included(self):
        document = docx.Document()
        document.add_paragraph("Fee Schedule")
        table = document.add_table(rows=1, cols=2)
        table.rows[0].cells[0].text = "Setup"
        table.rows[0].cells[1].text = "$500"
        buffer = io.BytesIO()
        document.save(buffer)
        extractor = TextExtractor(transport=_serving(buffer.getvalue()))

        text = await extractor.extract("https://storage.example.com/fees.docx")

        assert text == "Fee Schedule Setup | $500"

    @pytest.mark.asyncio
    async def test_pdf_text_layer_is_extracted(self, monkeypatch):
        reader_opened = _fake_pdf_reader(
            monkeypatch, ["Lease Agreement\nPage 1 of 2", "Rent is due monthly."]
        )
        plumber_opened = _fake_pdfplumber(monkeypatch, ["unused"])
        extractor = TextExtractor(transport=_serving(b"%PDF-1.4 lease"))

        text = await extractor.extract("https://storage.example.com/lease.pdf", "application/pdf")

        assert text == "Lease Agreement  Rent is due monthly."
        assert len(reader_opened) == 1
        assert plumber_opened == []

    @pytest.mark.asyncio
    async def test_pdf_without_text_layer_falls_back_to_pdfplumber(self, monkeypatch):
        _fake_pdf_reader(monkeypatch, [None, "   "])
        plumber_opened = _fake_pdfplumber(monkeypatch, ["Scanned Lease", "Signed by both parties"])
        extractor = TextExtractor(transport=_serving(b"%PDF-1.4 scanned"))

        text = await extractor.extract("https://storage.example.com/scanned.pdf")

        assert text == "Scanned Lease Signed by both parties"
        assert len(plumber_opened) == 1
        assert plumber_opened[0].endswith(".pdf")

    @pytest.mark.asyncio
    async def test_encrypted_pdf_raises_extraction_error(self, monkeypatch):
        _fake_pdf_reader(monkeypatch, ["secret"], encrypted=True)
        plumber_opened = _fake_pdfplumber(monkeypatch, ["secret"])
        extractor = TextExtractor(transport=_serving(b"%PDF-1.4 locked"))

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract("https://storage.example.com/locked.pdf")

        assert "encrypted" in exc_info.value.message
        assert plumber_opened == []

    @pytest.mark.asyncio
    async def test_real_encrypted_pdf_is_rejected(self):
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        writer.encrypt("owner-only")
        buffer = io.BytesIO()
        writer.write(buffer)
        extractor = TextExtractor(transport=_serving(buffer.getvalue()))

        with pytest.raises(ExtractionError):
            await extractor.extract("https://storage.example.com/protected.pdf")

    @pytest.mark.asyncio
    async def test_failed_download_raises_extraction_error(self):
        extractor = TextExtractor(transport=_serving(b"missing", status_code=404))

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract("https://storage.example.com/gone.pdf")

        assert "404" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_network_error_raises_extraction_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        extractor = TextExtractor(transport=httpx.MockTransport(handler))

        with pytest.raises(ExtractionError):
            await extractor.extract("https://storage.example.com/contract.pdf")

    @pytest.mark.asyncio
    async def test_temp_file_is_removed_after_success(self, monkeypatch):
        seen_paths = []

        def fake_extract_docx(path):
            seen_paths.append(path)
            assert os.path.exists(path)
            return "Signed copy"

        monkeypatch.setattr(TextExtractor, "_extract_docx", staticmethod(fake_extract_docx))
        extractor = TextExtractor(transport=_serving(b"docx-bytes"))

        assert await extractor.extract("https://storage.example.com/signed.docx") == "Signed copy"
        assert seen_paths and not os.path.exists(seen_paths[0])

    @pytest.mark.asyncio
    async def test_temp_file_is_removed_after_parser_failure(self, monkeypatch):
        seen_paths = []

        def broken_extract_docx(path):
            seen_paths.append(path)
            raise ValueError("not a zip file")

        monkeypatch.setattr(TextExtractor, "_extract_docx", staticmethod(broken_extract_docx))
        extractor = TextExtractor(transport=_serving(b"corrupt"))

        with pytest.raises(ExtractionError):
            await extractor.extract("https://storage.example.com/corrupt.docx")
        assert seen_paths and not os.path.exists(seen_paths[0])

    def test_from_settings_uses_download_timeout(self):
        settings = text_extractor.Settings(DATABASE_URL="sqlite://", DOWNLOAD_TIMEOUT_SECONDS=5.0)
        assert TextExtractor.from_settings(settings).timeout == 5.0
