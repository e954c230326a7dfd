"""Rick and Morty character API client implementation."""

import logging
import threading
from typing import Any

import requests
from pydantic import ValidationError as PydanticValidationError

from rmx.core.constants import API_BASE_URL, APIConstants
from rmx.exceptions import (
    CharacterNotFoundError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    TransportError,
)
from rmx.models.character import Character, CharacterPage
from rmx.models.filters import FilterSet


class CatalogAPIClient:
    """Read-only client for the character catalog.

    Holds no state besides the HTTP session and never retries: retrying is left to
    the fetch coordinator so that every attempt is accounted for in one place.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        """Initialize the API client.

        Args:
            base_url: API root (defaults to the public Rick and Morty API)
            timeout: Per-request timeout in seconds

        """
        self.logger = logging.getLogger(__name__)

        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.timeout = timeout or float(APIConstants.REQUEST_TIMEOUT)
        self.session: requests.Session | None = None
        # Loaders run on worker threads; one request at a time per session
        self._request_lock = threading.Lock()

        self.logger.info("CatalogAPIClient initialized")
        self.logger.debug(f"Base URL: {self.base_url}")

    def __enter__(self) -> "CatalogAPIClient":
        """Enter context."""
        self.logger.info("Opening client session")
        self.session = requests.Session()
        self.logger.debug("Client session opened successfully")
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context."""
        self.logger.info("Closing client session")
        if self.session:
            self.session.close()
            self.session = None
            self.logger.debug("Client session closed successfully")
        else:
            self.logger.warning("No session to close")

    @property
    def headers(self) -> dict[str, str]:
        """Get request headers."""
        return {"Accept": "application/json"}

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        not_found: NotFoundError | None = None,
    ) -> dict[str, Any]:
        """Make an API request and map failures to typed errors.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            params: Query parameters
            not_found: Error to raise on 404

        Returns:
            Response data

        """
        if not self.session:
            raise RuntimeError("Client not initialized. Use context manager.")

        url = f"{self.base_url}{endpoint}"
        method_name = f"{method} {endpoint}"

        self.logger.debug(f"Making request: {method_name} {params or {}}")

        try:
            with self._request_lock:
                response = self.session.request(
                    method, url, headers=self.headers, params=params, timeout=self.timeout
                )
        except requests.exceptions.Timeout:
            raise RequestTimeoutError(method_name, self.timeout) from None
        except requests.exceptions.RequestException as e:
            raise TransportError(None, f"Connection failed in {method_name}: {e}") from e

        if 200 <= response.status_code < 300:
            try:
                return response.json()
            except ValueError as e:
                raise TransportError(
                    response.status_code, f"Malformed JSON in {method_name}", response.text
                ) from e

        response_text = response.text

        if response.status_code == 404:
            raise not_found or NotFoundError(f"Resource not found in {method_name}")
        if response.status_code == 408:
            raise RequestTimeoutError(method_name, self.timeout)
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                f"Rate limit exceeded in {method_name}",
                response_text,
                int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if 500 <= response.status_code < 600:
            raise TransportError(response.status_code, f"Server error in {method_name}", response_text)
        raise TransportError(
            response.status_code,
            f"Unexpected response status {response.status_code} in {method_name}",
            response_text,
        )

    def fetch_characters(self, page: int = 1, filters: FilterSet | None = None) -> CharacterPage:
        """Fetch one page of the character collection.

        Args:
            page: 1-based page number
            filters: Filters; only non-empty values are sent

        Returns:
            The requested page

        Raises:
            NotFoundError: If no character matches the filters
            TransportError: For any other failure

        """
        filters = filters or FilterSet()
        params: dict[str, Any] = {"page": page, **filters.active()}
        self.logger.info(f"Fetching characters page {page}")

        data = self._make_request(
            "GET",
            "/character",
            params=params,
            not_found=NotFoundError("No characters found matching your criteria", {"filters": filters.active()}),
        )
        try:
            result = CharacterPage.model_validate(data)
        except PydanticValidationError as e:
            raise TransportError(200, f"Unexpected collection payload: {e.error_count()} errors") from e

        self.logger.debug(f"Got {len(result.results)} characters (page {page}/{result.total_pages})")
        return result

    def fetch_character(self, character_id: int) -> Character:
        """Fetch a single character.

        Args:
            character_id: The character ID

        Returns:
            Character details

        Raises:
            CharacterNotFoundError: If the identifier does not resolve
            TransportError: For any other failure

        """
        self.logger.info(f"Fetching character {character_id}")

        data = self._make_request("GET", f"/character/{character_id}", not_found=CharacterNotFoundError(character_id))
        try:
            return Character.model_validate(data)
        except PydanticValidationError as e:
            raise TransportError(200, f"Unexpected character payload: {e.error_count()} errors") from e
