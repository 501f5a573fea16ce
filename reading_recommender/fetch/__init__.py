"""Best-effort page title lookups.

Title lookups never fail the caller: every error is returned as a typed
TitleResult and callers substitute the URL.
"""

from reading_recommender.fetch.metrics import FetchMetrics
from reading_recommender.fetch.models import FetchErrorKind, TitleFetchError, TitleResult
from reading_recommender.fetch.title import (
    HttpTitleFetcher,
    TitleFetcher,
    extract_title_from_html,
    resolve_titles,
)


__all__ = [
    "FetchErrorKind",
    "FetchMetrics",
    "HttpTitleFetcher",
    "TitleFetchError",
    "TitleFetcher",
    "TitleResult",
    "extract_title_from_html",
    "resolve_titles",
]
