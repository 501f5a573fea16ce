"""Best-effort page title lookups with failure isolation."""

import math
import time
from concurrent.futures import ThreadPoolExecutor, wait
from io import BytesIO
from typing import Protocol

import httpx
import structlog
from bs4 import BeautifulSoup

from reading_recommender.config.schemas import TitleFetchConfig
from reading_recommender.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    TITLE_MAX_LENGTH,
)
from reading_recommender.fetch.metrics import FetchMetrics
from reading_recommender.fetch.models import FetchErrorKind, TitleResult


logger = structlog.get_logger()


class TitleFetcher(Protocol):
    """Collaborator that looks up a page title for a URL.

    Implementations must return a TitleResult and never raise.
    """

    def fetch_title(self, url: str) -> TitleResult:
        """Look up the title of the page at url."""
        ...


class _ResponseTooLargeError(Exception):
    """Raised internally when a body exceeds the configured size limit."""


def extract_title_from_html(html: str) -> str | None:
    """Extract a page title from HTML.

    Tries the <title> element first, then the first <h1>. Whitespace is
    collapsed and the result is truncated to a sane length.

    Args:
        html: HTML document text.

    Returns:
        The title, or None if neither element has text.
    """
    soup = BeautifulSoup(html, "lxml")

    for tag_name in ("title", "h1"):
        tag = soup.find(tag_name)
        if tag is None:
            continue
        text = " ".join(tag.get_text(" ", strip=True).split())
        if text:
            return text[:TITLE_MAX_LENGTH]

    return None


class HttpTitleFetcher:
    """Fetches pages over HTTP and extracts their titles.

    Every failure is converted into a TitleResult carrying a FetchErrorKind;
    no exception escapes fetch_title.
    """

    def __init__(
        self,
        config: TitleFetchConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Title fetch configuration.
            transport: Optional httpx transport (for tests).
        """
        self._config = config or TitleFetchConfig()
        self._transport = transport
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch", subcomponent="title")

    def fetch_title(self, url: str) -> TitleResult:
        """Fetch a URL and extract its title.

        Args:
            url: Page URL.

        Returns:
            TitleResult with the title, or an error of kind timeout,
            http_error, parse_error, or not_found.
        """
        start_ns = time.perf_counter_ns()
        result = self._fetch(url)
        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000

        if result.error is None:
            self._metrics.record_success(duration_ms)
            self._log.debug("title_fetched", url=url, duration_ms=round(duration_ms, 2))
        else:
            self._metrics.record_failure(result.error.kind, duration_ms)
            self._log.warning(
                "title_fetch_failed",
                url=url,
                error_kind=result.error.kind.value,
                status_code=result.error.status_code,
                error=result.error.message,
                duration_ms=round(duration_ms, 2),
            )
        return result

    def _fetch(self, url: str) -> TitleResult:
        try:
            with (
                httpx.Client(
                    timeout=self._config.timeout_seconds,
                    follow_redirects=True,
                    transport=self._transport,
                    headers={
                        "User-Agent": self._config.user_agent,
                        "Accept": "text/html,application/xhtml+xml",
                    },
                ) as client,
                client.stream("GET", url) as response,
            ):
                if not HTTP_STATUS_OK_MIN <= response.status_code < HTTP_STATUS_OK_MAX:
                    return TitleResult.failure(
                        url,
                        FetchErrorKind.HTTP_ERROR,
                        f"HTTP status {response.status_code}",
                        status_code=response.status_code,
                    )
                body = self._read_body_with_limit(response)
                encoding = response.encoding or "utf-8"
        except httpx.TimeoutException as e:
            return TitleResult.failure(url, FetchErrorKind.TIMEOUT, f"Request timed out: {e}")
        except _ResponseTooLargeError as e:
            return TitleResult.failure(url, FetchErrorKind.PARSE_ERROR, str(e))
        except httpx.HTTPError as e:
            return TitleResult.failure(
                url, FetchErrorKind.HTTP_ERROR, f"Request failed: {e}"
            )

        try:
            html = body.decode(encoding, errors="replace")
            title = extract_title_from_html(html)
        except Exception as e:  # noqa: BLE001
            return TitleResult.failure(
                url, FetchErrorKind.PARSE_ERROR, f"Could not parse page: {e}"
            )

        if title is None:
            return TitleResult.failure(
                url, FetchErrorKind.NOT_FOUND, "No <title> or <h1> in page"
            )
        return TitleResult.success(url, title)

    def _read_body_with_limit(self, response: httpx.Response) -> bytes:
        """Read response body with size limit.

        Args:
            response: Streaming HTTP response.

        Returns:
            Response body bytes.

        Raises:
            _ResponseTooLargeError: If the size limit is exceeded.
        """
        buffer = BytesIO()
        total_read = 0
        max_size = self._config.max_response_size_bytes

        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > max_size:
                msg = f"Response size exceeded limit of {max_size} bytes"
                raise _ResponseTooLargeError(msg)
            buffer.write(chunk)

        return buffer.getvalue()


def resolve_titles(
    fetcher: TitleFetcher,
    urls: list[str],
    max_workers: int = 5,
    timeout_seconds: float = 5.0,
) -> dict[str, str]:
    """Resolve titles for many URLs with bounded concurrency.

    At most max_workers lookups are in flight. The whole batch gets a
    wall-clock deadline of timeout_seconds per wave of workers; lookups that
    fail, raise, or are still running at the deadline resolve to the URL.

    Args:
        fetcher: Title lookup collaborator.
        urls: URLs to resolve.
        max_workers: Maximum concurrent lookups.
        timeout_seconds: Per-lookup timeout in seconds.

    Returns:
        Mapping of every input URL to a title or the URL itself.
    """
    unique_urls = list(dict.fromkeys(urls))
    titles = {url: url for url in unique_urls}
    if not unique_urls:
        return titles

    log = logger.bind(component="fetch", subcomponent="title_batch")
    waves = math.ceil(len(unique_urls) / max_workers)
    deadline = timeout_seconds * waves

    executor = ThreadPoolExecutor(max_workers=max_workers)
    try:
        future_to_url = {
            executor.submit(fetcher.fetch_title, url): url for url in unique_urls
        }
        done, not_done = wait(future_to_url, timeout=deadline)

        for future in done:
            url = future_to_url[future]
            try:
                result = future.result()
            except Exception as e:  # noqa: BLE001
                log.warning("title_fetch_error", url=url, error=str(e))
                continue
            titles[url] = result.title_or_url()

        if not_done:
            log.warning(
                "title_fetch_deadline_exceeded",
                pending=len(not_done),
                deadline_seconds=deadline,
            )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    log.info(
        "titles_resolved",
        requested=len(unique_urls),
        resolved=sum(1 for url, title in titles.items() if title != url),
    )
    return titles
