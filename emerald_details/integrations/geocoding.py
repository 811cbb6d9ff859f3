"""Geocoding and place search.

Implements the three lookups the booking wizard needs against an
OpenStreetMap Nominatim-compatible API:

- forward geocode: address string -> coordinate + locality fields
- reverse geocode: coordinate -> street address
- place search: free text, biased to a radius around a reference point

NOTE:
Nominatim usage policy requires a valid User-Agent with contact info and
reasonable rate limits. Point NOMINATIM_BASE_URL at a self-hosted
Nominatim/Photon for production traffic.
"""

import logging
import math
from typing import Any, Optional, Protocol

import httpx

from emerald_details.config import settings
from emerald_details.errors import GeocodingError
from emerald_details.schemas.location_schema import Location

logger = logging.getLogger(__name__)

METERS_PER_DEGREE_LAT = 111_320.0
UNKNOWN_ADDRESS = "Unknown Address"


class Geocoder(Protocol):
    """Geocoding provider contract consumed by the booking wizard."""

    async def geocode(self, address: str) -> Optional[Location]: ...

    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[Location]: ...

    async def search(
        self,
        query: str,
        near: Optional[tuple[float, float]] = None,
        radius_m: Optional[int] = None,
    ) -> list[Location]: ...


def _street(address: dict[str, Any]) -> str:
    return " ".join(p for p in (address.get("house_number"), address.get("road")) if p)


def _locality(address: dict[str, Any]) -> Optional[str]:
    return address.get("city") or address.get("town") or address.get("village")


def _to_location(item: dict[str, Any], address_text: str) -> Location:
    details = item.get("address") or {}
    return Location(
        latitude=float(item["lat"]),
        longitude=float(item["lon"]),
        address=address_text,
        city=_locality(details),
        state=details.get("state"),
        zip_code=details.get("postcode"),
    )


def viewbox(latitude: float, longitude: float, radius_m: int) -> str:
    """Bounding box ``left,top,right,bottom`` around a point."""
    dlat = radius_m / METERS_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(latitude)), 1e-6)
    dlon = radius_m / (METERS_PER_DEGREE_LAT * cos_lat)
    return f"{longitude - dlon},{latitude + dlat},{longitude + dlon},{latitude - dlat}"


class NominatimGeocoder:
    """Nominatim HTTP client. Pass ``client`` to reuse a connection pool."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> None:
        self._client = client
        self._base_url = (base_url or settings.geocoding.base_url).rstrip("/")
        self._user_agent = user_agent or settings.geocoding.user_agent
        self._timeout = timeout or settings.geocoding.timeout_sec
        self._limit = limit or settings.geocoding.result_limit

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        headers = {"User-Agent": self._user_agent, "Accept": "application/json"}
        url = f"{self._base_url}/{path}"
        try:
            if self._client is not None:
                resp = await self._client.get(url, params=params, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Geocoding request to %s failed: %s", path, e)
            raise GeocodingError(f"Geocoding provider unreachable: {e}") from e

        if resp.status_code >= 400:
            logger.warning("Nominatim error %s: %s", resp.status_code, resp.text[:200])
            raise GeocodingError(f"Geocoding provider error ({resp.status_code})")
        return resp.json()

    async def geocode(self, address: str) -> Optional[Location]:
        address = (address or "").strip()
        if not address:
            return None
        results = await self._get("search", {
            "q": address, "format": "json", "addressdetails": 1, "limit": 1,
        })
        if not results:
            logger.info("No geocoding match for %r", address)
            return None
        return _to_location(results[0], address)

    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[Location]:
        item = await self._get("reverse", {
            "lat": latitude, "lon": longitude, "format": "json", "addressdetails": 1,
        })
        if not item or "error" in item:
            return None
        street = _street(item.get("address") or {})
        location = _to_location(item, street or UNKNOWN_ADDRESS)
        # Keep the requested coordinate, not the matched feature's centroid
        return location.model_copy(update={"latitude": latitude, "longitude": longitude})

    async def search(
        self,
        query: str,
        near: Optional[tuple[float, float]] = None,
        radius_m: Optional[int] = None,
    ) -> list[Location]:
        query = (query or "").strip()
        if not query:
            return []
        params: dict[str, Any] = {
            "q": query, "format": "json", "addressdetails": 1,
            "limit": str(self._limit), "dedupe": 1,
        }
        if near is not None:
            params["viewbox"] = viewbox(
                near[0], near[1], radius_m or settings.geocoding.search_radius_meters
            )
            params["bounded"] = 1

        results = await self._get("search", params)
        locations = []
        for item in results:
            if "lat" not in item or "lon" not in item:
                continue
            street = _street(item.get("address") or {})
            name = item.get("name") or (item.get("display_name") or "").split(",")[0]
            locations.append(_to_location(item, street or name or "Unknown"))
        return locations
