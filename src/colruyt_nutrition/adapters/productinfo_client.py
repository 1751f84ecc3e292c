"""HTTP client for the Colruyt product info pages."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_UNAVAILABLE_STATUSES = {429}


class UpstreamUnavailableError(RuntimeError):
    """Raised when the product info service refuses or fails a request."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Product info request failed: status={status_code} url={url}")
        self.url = url
        self.status_code = status_code


@dataclass(frozen=True)
class HttpResult:
    """Status and body text of a completed GET request."""

    status: int
    text: str


class ProductInfoClient(Protocol):
    """Interface for fetching product info pages."""

    async def get(self, url: str) -> HttpResult:
        """Perform a GET request and return the status and body text."""


@dataclass
class HttpxProductInfoClient(ProductInfoClient):
    """HTTPX-backed product info client."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 15.0

    @classmethod
    def create(cls, timeout_seconds: float = 15.0) -> "HttpxProductInfoClient":
        """Create a client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True),
            timeout_seconds=timeout_seconds,
        )

    async def get(self, url: str) -> HttpResult:
        """Fetch ``url``; throttling and server errors raise."""
        response = await self.http_client.get(url, timeout=self.timeout_seconds)
        if response.status_code in _UNAVAILABLE_STATUSES or response.is_server_error:
            raise UpstreamUnavailableError(url, response.status_code)
        return HttpResult(status=response.status_code, text=response.text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
