"""Data models for best-effort title lookups."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class FetchErrorKind(str, Enum):
    """Classification of title lookup failures.

    - TIMEOUT: Request timed out
    - HTTP_ERROR: Non-2xx response or transport failure
    - PARSE_ERROR: Body could not be decoded or parsed
    - NOT_FOUND: Page parsed but has no usable <title> or <h1>
    """

    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"
    NOT_FOUND = "not_found"


class TitleFetchError(BaseModel):
    """Typed error from a title lookup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: FetchErrorKind = Field(description="Classification of the error")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]
    status_code: int | None = Field(
        default=None, description="HTTP status code for http_error"
    )


class TitleResult(BaseModel):
    """Result of a title lookup: either a title or an error, never both."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Annotated[str, Field(min_length=1)]
    title: str | None = None
    error: TitleFetchError | None = None

    @property
    def ok(self) -> bool:
        """Check if a non-empty title was found."""
        return self.error is None and bool(self.title)

    def title_or_url(self) -> str:
        """Get the title, or the URL when the lookup failed."""
        return self.title if self.ok and self.title else self.url

    @classmethod
    def success(cls, url: str, title: str) -> "TitleResult":
        """Build a successful result."""
        return cls(url=url, title=title)

    @classmethod
    def failure(
        cls,
        url: str,
        kind: FetchErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> "TitleResult":
        """Build a failed result."""
        return cls(
            url=url,
            error=TitleFetchError(kind=kind, message=message, status_code=status_code),
        )
