"""
HTTP client for Wakapi's WakaTime-compatible API.

**Conceptual**: This module provides a thin wrapper around HTTP requests to a
Wakapi server. It handles authentication, request construction, error
handling and JSON decoding. It does NOT interpret the payloads; turning them
into DailyUsage is extraction.py's job.

**Why separate HTTP client from extraction?**
  - Testability: extraction is pure and tested with plain dicts; the client
    is tested with mocked responses.
  - Debugging: raw responses can be logged without normalization noise.

**Authentication**: Wakapi (like WakaTime) accepts the API key as HTTP Basic
credentials, base64-encoded, in the Authorization header.
"""

import base64
import logging
from typing import Any, Dict, Optional

import requests

from wakapi_sync.config.settings import WakapiSettings

logger = logging.getLogger(__name__)


class WakapiClientError(Exception):
    """
    Base exception for Wakapi API client errors.

    Callers can catch WakapiClientError to handle every Wakapi failure, or the
    subclasses below for specific status codes.
    """
    pass


class WakapiAuthenticationError(WakapiClientError):
    """
    Raised on 401 Unauthorized or 403 Forbidden.

    **Recovery**: Check WAKAPI_API_KEY in .env.
    """
    pass


class WakapiNotFoundError(WakapiClientError):
    """
    Raised on 404 Not Found.

    Usually means WAKAPI_URL or WAKAPI_API_PREFIX points at the wrong path.
    """
    pass


class WakapiRateLimitError(WakapiClientError):
    """Raised on 429 Too Many Requests."""
    pass


class WakapiServerError(WakapiClientError):
    """Raised when the server returns a 5xx status."""
    pass


class WakapiClient:
    """
    Thin HTTP client for the statusbar and summaries endpoints.

    **Responsibilities**:
      - Build endpoint URLs from settings.api_root
      - Send the Basic auth header
      - Apply the configured timeout
      - Map HTTP errors (401/403, 404, 429, 5xx, timeout) to exceptions
      - Return the decoded JSON object

    **Example usage**:
        >>> settings = WakapiSettings.from_env()
        >>> with WakapiClient(settings) as client:
        ...     today = client.get_statusbar_today()
        ...     summaries = client.get_summaries("2026-02-14", "2026-02-14")
    """

    def __init__(self, settings: WakapiSettings):
        """
        Args:
            settings: Wakapi API configuration (base_url, api_key, api_prefix,
                     timeout_seconds).
        """
        self.settings = settings
        self.session = requests.Session()

        token = base64.b64encode(self.settings.api_key.encode("utf-8")).decode("ascii")
        self.session.headers.update({
            "Authorization": f"Basic {token}",
            "Accept": "application/json",
            "User-Agent": "wakapi_sync/1.0",
        })

    def get_statusbar_today(self) -> Dict[str, Any]:
        """
        Fetch today's aggregate from users/current/statusbar/today.

        Returns:
            Decoded JSON, {"data": {"grand_total": ..., "projects": ..., "languages": ...}}.

        Raises:
            WakapiAuthenticationError, WakapiNotFoundError, WakapiRateLimitError,
            WakapiServerError, WakapiClientError: See _get.
            requests.Timeout: If the request exceeds the timeout.
        """
        return self._get("users/current/statusbar/today")

    def get_summaries(self, start_date: str, end_date: str) -> Dict[str, Any]:
        """
        Fetch per-day summaries for a date range (inclusive).

        Args:
            start_date: First day, YYYY-MM-DD.
            end_date: Last day, YYYY-MM-DD.

        Returns:
            Decoded JSON, {"data": [{"grand_total": ..., ...}, ...]}.

        Raises:
            ValueError: If either date is empty.
            WakapiClientError (and subclasses), requests.Timeout: See _get.
        """
        if not start_date or not end_date:
            raise ValueError("start_date and end_date are required")

        return self._get(
            "users/current/summaries",
            params={"start": start_date, "end": end_date},
        )

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.settings.api_root}/{endpoint}"
        logger.debug("GET %s params=%s", url, params)

        try:
            response = self.session.get(
                url,
                params=params,
                timeout=self.settings.timeout_seconds,
            )
        except requests.Timeout as e:
            raise requests.Timeout(
                f"Request to Wakapi timed out after {self.settings.timeout_seconds}s. "
                f"Check network connection or increase WAKAPI_TIMEOUT_SECONDS."
            ) from e
        except requests.ConnectionError as e:
            raise WakapiClientError(
                f"Failed to connect to Wakapi at {self.settings.base_url}. "
                f"Check network connection and WAKAPI_URL."
            ) from e
        except requests.RequestException as e:
            raise WakapiClientError(f"HTTP request failed: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise WakapiAuthenticationError(
                f"Authentication failed (status {status}). "
                f"Check your WAKAPI_API_KEY. Response: {response.text}"
            )
        if status == 404:
            raise WakapiNotFoundError(
                f"Endpoint not found: {url}. Check WAKAPI_URL and WAKAPI_API_PREFIX. "
                f"Response: {response.text}"
            )
        if status == 429:
            raise WakapiRateLimitError(
                f"Rate limit exceeded. Response: {response.text}"
            )
        if status >= 500:
            raise WakapiServerError(
                f"Wakapi server error (status {status}). Response: {response.text}"
            )
        if status >= 400 or status < 200:
            raise WakapiClientError(
                f"Unexpected status {status} from {url}. Response: {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise WakapiClientError(
                f"Failed to parse JSON response: {e}. Response: {response.text}"
            ) from e

        if not isinstance(payload, dict):
            raise WakapiClientError(
                f"Expected a JSON object from {url}, got {type(payload).__name__}"
            )

        return payload

    def close(self):
        """Close the HTTP session and release pooled connections."""
        self.session.close()

    def __enter__(self):
        """Enable context manager support (with statement)."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Clean up session when exiting context manager."""
        self.close()
        return False  # Don't suppress exceptions
