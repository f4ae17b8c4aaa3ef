import logging
from typing import Any, Callable, Optional

from geopy.exc import GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from area_agent.config.settings import settings
from area_agent.models.schemas import GeocodeResult
from area_agent.services.geocode_cache import GeocodeCache

logger = logging.getLogger(__name__)

# Nominatim omits `importance` for some results; treat those as middling
DEFAULT_IMPORTANCE = 0.5


def normalize_address(address: str) -> str:
    """Cache key for an address: surrounding whitespace removed, case-folded."""
    return address.strip().lower()


def compose_structured_address(address_line: str, subdistrict: str, district: str, province: str,
                               country: Optional[str] = None) -> str:
    """
    Joins the non-empty address parts, followed by the country qualifier, with ', '.
    Returns an empty string when every part is blank, so a bare country is never geocoded.
    """
    if country is None:
        country = settings.geocoding_country_qualifier
    parts = [p.strip() for p in (address_line, subdistrict, district, province) if p and p.strip()]
    if not parts:
        return ""
    if country and country.strip():
        parts.append(country.strip())
    return ", ".join(parts)


def build_default_geocoder() -> Nominatim:
    """Builds the Nominatim geocoder described by the settings."""
    user_agent = settings.geocoding_user_agent
    if not user_agent or user_agent == "your-app-name-here":
        logger.warning("A unique User-Agent for geocoding is not configured. Using a default.")
        user_agent = "area-resolution-agent/1.0"
    return Nominatim(
        user_agent=user_agent,
        domain=settings.nominatim_domain,
        scheme=settings.nominatim_scheme,
        timeout=settings.geocoding_timeout_seconds,
    )


class GeocodingClient:
    """
    Address -> coordinate lookups against a geopy geocoder, memoized by normalized address.

    Provider failures (transport errors, non-success responses, empty results) are logged
    and reported as None; nothing raised by the provider escapes this class.
    """

    def __init__(self, geocoder: Any = None, cache: Optional[GeocodeCache] = None,
                 min_delay_seconds: Optional[float] = None):
        self.geocoder = geocoder if geocoder is not None else build_default_geocoder()
        self.cache = cache if cache is not None else GeocodeCache(
            max_entries=settings.geocode_cache_max_entries,
            ttl_seconds=settings.geocode_cache_ttl_seconds,
        )
        if min_delay_seconds is None:
            min_delay_seconds = settings.geocoding_min_delay_seconds

        self._geocode: Callable[..., Any] = self.geocoder.geocode
        self._reverse: Callable[..., Any] = self.geocoder.reverse
        if min_delay_seconds > 0:
            self._geocode = RateLimiter(self.geocoder.geocode, min_delay_seconds=min_delay_seconds,
                                        max_retries=0, swallow_exceptions=False)
            self._reverse = RateLimiter(self.geocoder.reverse, min_delay_seconds=min_delay_seconds,
                                        max_retries=0, swallow_exceptions=False)

    def geocode(self, address: Optional[str]) -> Optional[GeocodeResult]:
        if not address or not address.strip():
            return None

        cache_key = normalize_address(address)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Geocode cache hit for '{cache_key}'.")
            return cached

        try:
            location = self._geocode(address, exactly_one=True)
        except GeopyError as e:
            logger.error(f"Geocoding error for address '{address}': {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected geocoding failure for address '{address}': {e}", exc_info=True)
            return None

        if not location:
            logger.warning(f"No geocoding results for address: {address}")
            return None

        result = self._to_result(location)
        if result is None:
            return None
        return self.cache.put(cache_key, result)

    def geocode_structured(self, address_line: str, subdistrict: str, district: str, province: str) -> Optional[GeocodeResult]:
        return self.geocode(compose_structured_address(address_line, subdistrict, district, province))

    def reverse_geocode(self, lat: float, lng: float) -> Optional[str]:
        """One-shot coordinate -> display string lookup. Not cached."""
        try:
            location = self._reverse((lat, lng), exactly_one=True)
        except GeopyError as e:
            logger.error(f"Reverse geocoding error for ({lat}, {lng}): {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected reverse geocoding failure for ({lat}, {lng}): {e}", exc_info=True)
            return None

        if not location:
            return None
        return getattr(location, "address", None) or None

    def _to_result(self, location: Any) -> Optional[GeocodeResult]:
        raw = getattr(location, "raw", None) or {}
        try:
            importance = raw.get("importance")
            confidence = DEFAULT_IMPORTANCE if importance is None else float(importance)
            return GeocodeResult(
                latitude=float(location.latitude),
                longitude=float(location.longitude),
                display_name=getattr(location, "address", "") or raw.get("display_name", ""),
                confidence=min(max(confidence, 0.0), 1.0),
            )
        except (TypeError, ValueError) as e:
            logger.error(f"Malformed geocoding result {raw}: {e}")
            return None
