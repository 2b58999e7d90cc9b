from __future__ import annotations

from typing import Any, Optional

import httpx

from weather_pusher.core.config import settings
from weather_pusher.services.errors import FetchError


class WeatherClient:
    """
    Client for the current-weather telemetry endpoint.

    The endpoint returns a loosely structured JSON document such as:

        {"datetime_utc": "...", "location": {"name": "..."},
         "main": {"temperature_c": 21.5, ...}, "wind": {...}, ...}

    The document is returned untouched; shaping it is the normalizer's job.
    No retries are attempted and the httpx default timeout applies.
    """

    def __init__(self, url: str | None = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url or settings.weather_url
        self.transport = transport

    async def fetch_raw(self) -> Any:
        """
        GET the telemetry document.

        Raises:
            FetchError: with `status` for non-2xx responses, with `cause`
                for transport failures or a body that is not valid JSON.
        """
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                r = await client.get(self.url, headers={"accept": "application/json"})
        except httpx.HTTPError as e:
            raise FetchError(f"request to {self.url} failed: {e}", cause=e) from e

        if not r.is_success:
            raise FetchError(f"fetch status {r.status_code}", status=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            raise FetchError(f"invalid JSON body from {self.url}", cause=e) from e
