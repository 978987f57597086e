"""Document acquisition from web pages, PDFs, and local files."""

from __future__ import annotations

import io
import mimetypes
import os
import random
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

import docx2txt
import requests
from bs4 import BeautifulSoup
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from . import logger
from .errors import DocumentLoadError
from .preprocess import clean_text
from .schemas import RawDocument

USER_AGENTS = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
    "DNT": "1",
    "Referer": "https://www.google.com/",
}

MAIN_CONTENT_SELECTOR = "main, article, .content, .main-content, #content, #main"
BOT_INDICATORS = ("bot manager", "access denied", "blocked", "security check")
MIN_PAGE_TEXT_LENGTH = 500
REQUEST_TIMEOUT = 20


def _create_document(title: str, content: str, category: str, doc_type: str, source: str) -> RawDocument:
    metadata = {
        "title": title,
        "category": category,
        "type": doc_type,
        "source": source,
        "loaded_at": datetime.now(timezone.utc).isoformat(),
    }
    return RawDocument(text=content, metadata=metadata)


def _pdf_text(stream, label: str) -> str:
    reader = PdfReader(stream)
    pages = [page.extract_text() or "" for page in reader.pages]
    content = clean_text("\n".join(pages), strip_repeated_lines=True)
    if not content:
        raise DocumentLoadError(f"No content extracted from PDF {label}")
    return content


def is_bot_protection_page(title: str, body_text: str) -> bool:
    """Return True when the fetched page is a captcha or bot wall instead of content."""

    lower_title = title.lower()
    lower_body = body_text.lower()
    if "radware" in lower_title or "captcha" in lower_title:
        return True
    if len(lower_body) < MIN_PAGE_TEXT_LENGTH:
        return True
    return any(indicator in lower_title or indicator in lower_body for indicator in BOT_INDICATORS)


def extract_page_text(html: str, url: str) -> RawDocument:
    """Parse an HTML page into a :class:`RawDocument`, preferring its main content region."""

    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""
    if not title:
        title = f"Web Content from {url}"

    body_text = soup.body.get_text(" ", strip=True) if soup.body else ""
    if is_bot_protection_page(title, body_text):
        raise DocumentLoadError(f"Bot protection page detected for {url}")

    for tag in soup(["script", "style"]):
        tag.decompose()

    main_content = soup.select(MAIN_CONTENT_SELECTOR)
    if main_content:
        text = " ".join(element.get_text(" ", strip=True) for element in main_content)
    elif soup.body:
        text = soup.body.get_text(" ", strip=True)
    else:
        text = ""

    content = clean_text(text)
    if not content:
        raise DocumentLoadError(f"No content found on the webpage {url}")
    return _create_document(title, content, "web", "url", url)


class DocumentLoader:
    """Load documents from URLs and files, reusing one HTTP session for cookies."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = REQUEST_TIMEOUT):
        self.session = session or requests.Session()
        self.timeout = timeout

    def load(self, source: str) -> RawDocument:
        """Load a single source, choosing the reader from its scheme or extension."""

        if source.startswith(("http://", "https://")):
            return self._load_url(source)

        path = Path(source)
        if not path.exists():
            raise DocumentLoadError(f"File does not exist: {source}")

        extension = path.suffix.lower()
        if extension == ".pdf":
            return self._load_pdf(path)
        if extension == ".txt":
            return self._load_text(path)
        return self._load_other(path)

    def load_all(self, sources: Iterable[str]) -> List[RawDocument]:
        """Load every source, logging and skipping the ones that fail."""

        source_list = list(sources)
        logger.info(f"Loading {len(source_list)} documents", "medicaid_rag.ingestion")
        documents: List[RawDocument] = []
        for source in source_list:
            try:
                documents.append(self.load(source))
            except (DocumentLoadError, PyPdfError, requests.RequestException, OSError, ValueError) as exc:
                logger.error(f"Error loading {source}: {exc}", "medicaid_rag.ingestion")
                continue
            logger.info(f"Loaded {source}", "medicaid_rag.ingestion")
        return documents

    def _load_url(self, url: str) -> RawDocument:
        logger.debug(f"Fetching {url}", "medicaid_rag.ingestion")
        headers = {**BROWSER_HEADERS, "User-Agent": random.choice(USER_AGENTS)}
        response = self.session.get(url, headers=headers, timeout=self.timeout, allow_redirects=True)
        response.raise_for_status()

        content_type = response.headers.get("Content-Type", "")
        if "application/pdf" in content_type or url.lower().endswith(".pdf"):
            title = Path(url.rsplit("/", 1)[-1]).stem or url
            content = _pdf_text(io.BytesIO(response.content), url)
            return _create_document(title, content, "pdf", "url", url)
        return extract_page_text(response.text, url)

    def _load_pdf(self, path: Path) -> RawDocument:
        content = _pdf_text(path, str(path))
        return _create_document(path.stem, content, "pdf", "file", str(path))

    def _load_text(self, path: Path) -> RawDocument:
        content = path.read_text(encoding="utf-8", errors="ignore")
        return _create_document(path.stem, content, "text", "file", str(path))

    def _load_other(self, path: Path) -> RawDocument:
        if path.suffix.lower() == ".docx":
            try:
                raw = docx2txt.process(str(path)) or ""
            except (zipfile.BadZipFile, KeyError) as exc:
                raise DocumentLoadError(f"Unreadable Word document {path}: {exc}") from exc
        else:
            raw = path.read_text(encoding="utf-8", errors="ignore")
        content = clean_text(raw)
        if not content:
            raise DocumentLoadError(f"No content extracted from file {path}")
        mime_type, _ = mimetypes.guess_type(path.name)
        return _create_document(path.name, content, mime_type or "application/octet-stream", "file", str(path))


def load_source(source: str | os.PathLike[str]) -> RawDocument:
    """Load one document with a fresh :class:`DocumentLoader`."""

    return DocumentLoader().load(os.fspath(source))


def load_sources(sources: Iterable[str | os.PathLike[str]]) -> List[RawDocument]:
    """Load several documents, skipping failures."""

    return DocumentLoader().load_all(os.fspath(source) for source in sources)
