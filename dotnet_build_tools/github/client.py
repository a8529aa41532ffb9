"""GitHub REST API client."""

from typing import Any

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from dotnet_build_tools import __version__
from dotnet_build_tools.config import GitHubSettings
from dotnet_build_tools.core.exceptions import GitHubError
from dotnet_build_tools.utils.logging import get_logger

logger = get_logger(__name__)


def _is_transient(error: BaseException) -> bool:
    """Retry connection failures and server-side errors only."""
    if not isinstance(error, GitHubError):
        return False
    return error.status_code is None or error.status_code >= 500


class GitHubClient:
    """
    Client for GitHub REST API operations.

    Handles authentication, request retries, and error handling. One
    instance is created by the caller and passed to whatever needs it.
    """

    API_VERSION = "2022-11-28"

    def __init__(
        self,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        upload_url: str = "https://uploads.github.com",
        timeout: int = 60,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: Token for authentication (anonymous when None)
            api_url: REST API base URL
            upload_url: Base URL for release asset uploads
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url.rstrip("/")
        self.upload_url = upload_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.API_VERSION,
            "User-Agent": f"dotnet-build-tools/{__version__}",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

        self._client: httpx.Client | None = None

    @classmethod
    def from_settings(cls, settings: GitHubSettings) -> "GitHubClient":
        """Create a client from GitHub settings."""
        return cls(
            token=settings.token.get_secret_value() if settings.token else None,
            api_url=settings.api_url,
            upload_url=settings.upload_url,
            timeout=settings.timeout,
        )

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                headers=self.headers,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _build_url(self, path: str) -> str:
        """Build full API URL from a path or pass an absolute URL through."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.api_url}/{path.lstrip('/')}"

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Make authenticated request to the GitHub API.

        Args:
            method: HTTP method
            path: API path or absolute URL
            **kwargs: Additional request arguments

        Returns:
            Successful response

        Raises:
            GitHubError: On API errors
        """
        url = self._build_url(path)
        logger.debug(f"[GITHUB] {method} {url}")

        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise GitHubError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            raise GitHubError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return response

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._send(method, path, **kwargs)
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def get(self, path: str, **kwargs: Any) -> Any:
        """Make GET request."""
        return self._request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        """Make POST request."""
        return self._request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        """Make PATCH request."""
        return self._request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        """Make DELETE request."""
        return self._request("DELETE", path, **kwargs)

    def upload(self, url: str, name: str, content: bytes, content_type: str) -> dict:
        """
        Upload a release asset.

        Args:
            url: Upload endpoint of the release (without URI template suffix)
            name: Asset file name
            content: Raw asset bytes
            content_type: MIME type sent with the upload

        Returns:
            Created asset details
        """
        return self._request(
            "POST",
            url,
            params={"name": name},
            content=content,
            headers={"Content-Type": content_type},
        )

    def download(self, path: str) -> bytes:
        """Download binary content such as a release asset."""
        response = self._send(
            "GET",
            path,
            headers={"Accept": "application/octet-stream"},
        )
        return response.content
