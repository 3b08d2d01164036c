"""Fetch, sanitize and adapt the published prediction documents."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from pathlib import Path
import threading
import urllib.error
import urllib.request
from urllib.parse import urljoin, urlparse
from urllib.request import url2pathname

from config.settings import DATA_BASE_URL, FETCH_TIMEOUT_SECONDS, PRIMARY_DOCUMENT, SUMMARY_DOCUMENT
from core.adapters import adapt_prediction_document, adapt_summary_document
from core.sanitizer import parse_document_text
from core.schema import DashboardData

LOGGER = logging.getLogger("foresight.loader")

STATUS_IDLE = "idle"
STATUS_LOADING = "loading"
STATUS_READY = "ready"
STATUS_FAILED = "failed"


class DocumentFetchError(OSError):
    """Raised when a document cannot be read from its location."""


def _is_remote(location: str) -> bool:
    return urlparse(location).scheme in {"http", "https"}


def _is_file_url(location: str) -> bool:
    return urlparse(location).scheme == "file"


def resolve_document_url(base_url: str | Path, name: str) -> str:
    """Resolve a relative document name against the configured base path."""
    base = str(base_url)
    if _is_remote(base) or _is_file_url(base):
        return urljoin(base.rstrip("/") + "/", name)
    return str(Path(base) / name)


def fetch_text(location: str, timeout: float | None = None) -> str:
    """
    Read one document as text from an http(s) URL, a file:// URL or a local path.

    There is no retry. ``timeout=None`` blocks until the source answers.

    Raises:
        DocumentFetchError: On any transport or filesystem failure.
    """
    if _is_remote(location):
        request = urllib.request.Request(
            location,
            headers={"User-Agent": "foresight-dashboard", "Accept": "application/json, */*"},
        )
        try:
            with urllib.request.urlopen(request, timeout=timeout) as response:
                return response.read().decode("utf-8-sig")
        except (urllib.error.URLError, TimeoutError, ConnectionError, UnicodeDecodeError) as error:
            raise DocumentFetchError(f"Failed to fetch {location}: {error}") from error

    path = Path(url2pathname(urlparse(location).path)) if _is_file_url(location) else Path(location)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as error:
        raise DocumentFetchError(f"Failed to read {path}: {error}") from error


def load_dashboard_data(
    base_url: str | Path = DATA_BASE_URL,
    primary_document: str = PRIMARY_DOCUMENT,
    summary_document: str | None = SUMMARY_DOCUMENT,
    timeout: float | None = FETCH_TIMEOUT_SECONDS,
) -> DashboardData:
    """
    Fetch the prediction document and, when configured, the summary document.

    Both requests run concurrently and are joined before parsing. Each text
    is ``NaN``-sanitized once and then parsed as strict JSON.

    Raises:
        DocumentFetchError, DocumentParseError, UnsupportedDocumentError
    """
    primary_url = resolve_document_url(base_url, primary_document)
    summary_url = resolve_document_url(base_url, summary_document) if summary_document else None

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="foresight-fetch") as executor:
        primary_future = executor.submit(fetch_text, primary_url, timeout)
        summary_future = executor.submit(fetch_text, summary_url, timeout) if summary_url else None
        primary_text = primary_future.result()
        summary_text = summary_future.result() if summary_future is not None else None

    document = adapt_prediction_document(parse_document_text(primary_text))
    summary = adapt_summary_document(parse_document_text(summary_text)) if summary_text is not None else None

    LOGGER.info(
        "Loaded %s prediction document with %d tickers%s",
        document.version,
        len(document.stocks),
        " and summary" if summary is not None else "",
    )
    return DashboardData(document=document, summary=summary)


class DashboardLoader:
    """
    Single load attempt for one page session.

    A failure is logged and leaves the loader in ``failed``; callers keep
    showing the loading screen. There is no retry.
    """

    def __init__(
        self,
        base_url: str | Path = DATA_BASE_URL,
        primary_document: str = PRIMARY_DOCUMENT,
        summary_document: str | None = SUMMARY_DOCUMENT,
        timeout: float | None = FETCH_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url
        self.primary_document = primary_document
        self.summary_document = summary_document
        self.timeout = timeout
        self._lock = threading.Lock()
        self._status = STATUS_IDLE
        self._data: DashboardData | None = None
        self._thread: threading.Thread | None = None

    @property
    def status(self) -> str:
        with self._lock:
            return self._status

    @property
    def data(self) -> DashboardData | None:
        with self._lock:
            return self._data

    @property
    def is_ready(self) -> bool:
        return self.data is not None

    def load(self) -> DashboardData | None:
        """Run the load synchronously; returns ``None`` on failure."""
        with self._lock:
            if self._status != STATUS_IDLE:
                return self._data
            self._status = STATUS_LOADING

        try:
            data = load_dashboard_data(
                base_url=self.base_url,
                primary_document=self.primary_document,
                summary_document=self.summary_document,
                timeout=self.timeout,
            )
        except Exception:
            LOGGER.exception("Failed to load prediction data from %s", self.base_url)
            with self._lock:
                self._status = STATUS_FAILED
            return None

        with self._lock:
            self._data = data
            self._status = STATUS_READY
        return data

    def start(self) -> threading.Thread:
        """Start the one-off load on a daemon thread."""
        with self._lock:
            if self._thread is not None:
                return self._thread
            self._thread = threading.Thread(target=self.load, name="foresight-loader", daemon=True)
            thread = self._thread
        thread.start()
        return thread
