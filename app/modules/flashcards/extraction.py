"""Extract plain text from uploaded or linked documents."""

from __future__ import annotations

import io
from typing import AsyncIterable, Optional

import httpx
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from app.core.config import settings
from app.core.logging import get_logger
from app.modules.flashcards.errors import (
    DocumentFetchError,
    DocumentParseError,
    DocumentTooLargeError,
)

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def is_pdf(*, name: Optional[str], content_type: Optional[str]) -> bool:
    return PDF_CONTENT_TYPE in (content_type or "") or (name or "").lower().endswith(".pdf")


def _pdf_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = reader.pages[: settings.extraction.max_pdf_pages]
        texts = [(page.extract_text() or "").strip() for page in pages]
    except (PyPdfError, ValueError) as e:
        raise DocumentParseError(f"PDF parse error: {e}") from e
    return "\n\n".join(t for t in texts if t)


def extract_text_from_bytes(
    data: bytes, *, filename: Optional[str] = None, content_type: Optional[str] = None
) -> str:
    """Decode a document body; PDFs go through pypdf, everything else is UTF-8."""
    if len(data) > settings.extraction.max_document_bytes:
        raise _too_large()
    if is_pdf(name=filename, content_type=content_type):
        return _pdf_text(data)
    return data.decode("utf-8", errors="replace")


def _too_large() -> DocumentTooLargeError:
    return DocumentTooLargeError(
        f"Document exceeds {settings.extraction.max_document_bytes} bytes"
    )


async def read_limited(chunks: AsyncIterable[bytes]) -> bytes:
    """Collect ``chunks``, stopping as soon as the document size limit is passed."""
    limit = settings.extraction.max_document_bytes
    data = bytearray()
    async for chunk in chunks:
        data.extend(chunk)
        if len(data) > limit:
            raise _too_large()
    return bytes(data)


async def extract_text_from_url(url: str, *, client: httpx.AsyncClient) -> str:
    """Download ``url`` and return its text content."""
    try:
        async with client.stream("GET", url, follow_redirects=True) as response:
            if not response.is_success:
                raise DocumentFetchError(f"Failed to fetch file: {response.status_code}")

            declared = response.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > settings.extraction.max_document_bytes:
                raise _too_large()

            data = await read_limited(response.aiter_bytes())
            content_type = response.headers.get("content-type", "")
    except httpx.HTTPError as e:
        raise DocumentFetchError(f"Failed to fetch file: {e}") from e

    logger.info(
        "Fetched document: url=%s content_type=%s bytes=%d",
        url,
        content_type or "unknown",
        len(data),
    )
    return extract_text_from_bytes(
        data,
        filename=httpx.URL(url).path,
        content_type=content_type,
    )
