"""Weather API Client - Imperative Shell.

This module handles HTTP communication with the WeatherAPI.com
current-conditions endpoint. All I/O is contained here; parsing and
classification are in the core module.
"""

import logging
from typing import Any

import requests

from enviro_alerts.core.config import DEFAULT_WEATHER_API_URL
from enviro_alerts.core.errors import FetchError
from enviro_alerts.core.readings import ReadingSnapshot, parse_snapshot


logger = logging.getLogger(__name__)


# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10


class WeatherClient:
    """Client for fetching current conditions from WeatherAPI.com.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_WEATHER_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize weather client.

        Args:
            api_key: WeatherAPI.com key
            base_url: Current-conditions endpoint
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    def _build_params(self, latitude: float, longitude: float) -> dict[str, str]:
        """Build query parameters for a current-conditions request."""
        return {
            "key": self.api_key or "",
            "q": f"{latitude},{longitude}",
            "aqi": "yes",
        }

    def fetch_raw(self, latitude: float, longitude: float) -> dict[str, Any]:
        """Fetch the raw current-conditions payload.

        This method performs HTTP I/O.

        Raises:
            FetchError: On network failure, non-2xx status or invalid JSON
        """
        params = self._build_params(latitude, longitude)

        try:
            response = requests.get(
                self.base_url,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            raise FetchError(f"Weather request timed out after {self.timeout}s") from e
        except requests.HTTPError as e:
            raise FetchError(
                f"Weather API returned {e.response.status_code if e.response is not None else '?'}"
            ) from e
        except requests.RequestException as e:
            raise FetchError(f"Weather request failed: {e}") from e
        except ValueError as e:
            raise FetchError("Weather API returned invalid JSON") from e

        if not isinstance(data, dict):
            raise FetchError("Weather API returned an unexpected payload")

        return data

    def fetch_current_conditions(self, latitude: float, longitude: float) -> ReadingSnapshot:
        """Fetch current conditions for a location.

        This method performs HTTP I/O.

        Args:
            latitude: Latitude
            longitude: Longitude

        Returns:
            Parsed ReadingSnapshot (fields may be None if not reported)

        Raises:
            FetchError: If the conditions could not be fetched
        """
        logger.debug("Fetching conditions for %.4f, %.4f", latitude, longitude)

        data = self.fetch_raw(latitude, longitude)

        # Pure core function
        snapshot = parse_snapshot(data)

        if not snapshot.is_complete:
            logger.info(
                "Incomplete conditions for %.4f, %.4f: %s",
                latitude,
                longitude,
                snapshot,
            )

        return snapshot
