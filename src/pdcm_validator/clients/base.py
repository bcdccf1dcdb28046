"""Base HTTP client shared by the service clients.

Provides:
- Session management with a custom User-Agent
- A configurable base URL and request timeout
- GET with JSON parsing

Subclasses add the domain-specific calls.
"""

import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0  # request timeout in seconds
DEFAULT_USER_AGENT = "pdcm-validator/0.1.0"


class HTTPClientBase:
    """Base class for HTTP API clients.

    Example:
        >>> class MyClient(HTTPClientBase):
        ...     def get_item(self, item_id: str) -> Any:
        ...         return self._get_json(f"{self.base_url}/items/{item_id}")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Service root, without trailing slash
            timeout: Request timeout in seconds
            user_agent: Custom User-Agent string (uses default if not provided)
            session: Pre-configured session (mostly for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": user_agent or DEFAULT_USER_AGENT,
            }
        )

    def _get(self, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        """Make a GET request.

        Raises:
            requests.RequestException: On network errors or non-2xx answers
        """
        logger.debug(f"GET {url} params={params}")
        response = self._session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request and return the parsed JSON body.

        Raises:
            requests.RequestException: On network errors
            ValueError: If the response is not valid JSON
        """
        return self._get(url, params).json()

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> "HTTPClientBase":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
