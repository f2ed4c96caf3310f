"""
Nominatim reverse-geocoding client.

Turns a map point into the display name OpenStreetMap has for it. Calls are
single shot with a timeout and no retry; failures surface as
``UpstreamUnavailable`` so callers can decide to carry on without an address.
"""

from typing import Any, Dict, Optional

import requests
from loguru import logger

from parkflow.application.repositories import AbstractGeocoder
from parkflow.config.settings_env import settings
from parkflow.domain.exceptions import UpstreamUnavailable


class NominatimGeocoder(AbstractGeocoder):
    """Client for the Nominatim ``/reverse`` endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        language: Optional[str] = None,
        user_agent: Optional[str] = None,
    ):
        self.base_url = base_url or settings.GEOCODER_URL
        self.timeout = timeout or settings.GEOCODER_TIMEOUT
        self.language = language or settings.GEOCODER_LANGUAGE
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': user_agent or settings.GEOCODER_USER_AGENT,
        })

    def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Reverse geocoding failed: {e}")
            raise UpstreamUnavailable("Reverse geocoding failed") from e

    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Look up the address of a point.

        Args:
            latitude: WGS84 latitude
            longitude: WGS84 longitude

        Returns:
            The full display name, or None when Nominatim knows nothing there

        Raises:
            UpstreamUnavailable: On network or HTTP errors
        """
        data = self._get({
            'format': 'jsonv2',
            'lat': latitude,
            'lon': longitude,
            'accept-language': self.language,
        })
        return data.get('display_name') if isinstance(data, dict) else None
