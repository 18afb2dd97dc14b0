"""Flight search client — adapter for the external flight-search endpoint."""

import logging

import httpx

from flight_agent.config import settings
from flight_agent.errors import FlightSearchError

logger = logging.getLogger(__name__)


class FlightSearchClient:
    """Fetches raw flight offers for one route and date."""

    def __init__(self, base_url: str | None = None, api_key: str | None = None, client: httpx.AsyncClient | None = None):
        self._base_url = settings.flight_api_base_url if base_url is None else base_url
        self._api_key = settings.flight_api_key if api_key is None else api_key
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            if not self._base_url:
                raise FlightSearchError("Flight search provider is not configured (FLIGHT_API_BASE_URL)")
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=settings.flight_api_timeout,
            )
        return self._client

    @staticmethod
    def build_query(origin: str, destination: str, departure_date: str, adults: int = 1, return_date: str | None = None) -> dict:
        query = {
            "from": origin,
            "to": destination,
            "date": departure_date,
            "adults": adults or 1,
        }
        if return_date:
            query["returnDate"] = return_date
        return query

    async def search(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        adults: int = 1,
        return_date: str | None = None,
    ) -> list[dict]:
        """Return the provider's offers unmodified; raises FlightSearchError on failure."""
        query = self.build_query(origin, destination, departure_date, adults, return_date)
        client = await self._get_client()
        logger.info(f"Searching flights with params: {query}")

        try:
            resp = await client.get("/flights", params=query)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Flight search HTTP {e.response.status_code} for {origin}->{destination}")
            raise FlightSearchError(f"Flight search failed with status {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Flight search request failed for {origin}->{destination}: {e}")
            raise FlightSearchError(f"Flight search request failed: {e}") from e
        except ValueError as e:
            raise FlightSearchError("Flight search returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise FlightSearchError("Flight search returned an unexpected payload")

        data = payload.get("data") or {}
        items = data.get("items") if isinstance(data, dict) else None
        if payload.get("success") and isinstance(items, list):
            logger.info(f"Flight search {origin}->{destination} on {departure_date}: {len(items)} offers")
            return items

        if payload.get("error"):
            raise FlightSearchError(str(payload["error"]))
        return []

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


flight_search_client = FlightSearchClient()
