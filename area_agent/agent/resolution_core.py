import logging
from functools import lru_cache
from typing import Optional, Sequence

from area_agent.models.schemas import (
    Area, ConfidenceTier, GeocodeResult, ResolutionMethod, ResolutionResult,
)
from area_agent.services.area_index import find_containing_area
from area_agent.services.geocoding import GeocodingClient, compose_structured_address

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE_SCORE = 0.7
MEDIUM_CONFIDENCE_SCORE = 0.4


def confidence_from_score(score: float) -> ConfidenceTier:
    """Maps a provider score to a tier. Both thresholds are exclusive."""
    if score > HIGH_CONFIDENCE_SCORE:
        return ConfidenceTier.HIGH
    if score > MEDIUM_CONFIDENCE_SCORE:
        return ConfidenceTier.MEDIUM
    return ConfidenceTier.LOW


class AreaResolutionAgent:
    """
    Assigns a patient or volunteer to one area from a coordinate and/or an address.

    Priority order:
      1. A supplied coordinate inside an area wins outright, without any address lookup.
      2. Otherwise the address is geocoded and its coordinate tested against the areas.
      3. A coordinate match that was not accepted in step 1 beats a failed address match.
      4. Otherwise no area; any geocoded coordinate is still returned for the caller to keep.

    Each call is independent; the only shared state is the geocoding client's cache.
    """

    def __init__(self, geocoding_client: Optional[GeocodingClient] = None):
        self.geocoding_client = geocoding_client if geocoding_client is not None else GeocodingClient()

    def resolve(self, lat: Optional[float], lng: Optional[float], address: Optional[str],
                areas: Sequence[Area]) -> ResolutionResult:
        coordinate_match: Optional[ResolutionResult] = None
        if lat is not None and lng is not None:
            area = find_containing_area((lat, lng), areas)
            if area:
                coordinate_match = ResolutionResult(
                    area=area, method=ResolutionMethod.COORDINATE, confidence=ConfidenceTier.HIGH,
                )
                if coordinate_match.confidence == ConfidenceTier.HIGH:
                    logger.debug(f"Coordinate ({lat}, {lng}) resolved to area '{area.name}'.")
                    return coordinate_match

        geocoded = self.geocoding_client.geocode(address)
        if geocoded:
            area = find_containing_area((geocoded.latitude, geocoded.longitude), areas)
            if area:
                tier = confidence_from_score(geocoded.confidence)
                logger.debug(f"Address '{address}' resolved to area '{area.name}' ({tier.value} confidence).")
                return self._from_geocode(geocoded, area=area, method=ResolutionMethod.ADDRESS, confidence=tier)

        if coordinate_match:
            return coordinate_match

        logger.info(f"No area found for coordinate ({lat}, {lng}) / address '{address}'.")
        if geocoded:
            return self._from_geocode(geocoded, area=None, method=ResolutionMethod.NONE, confidence=ConfidenceTier.LOW)
        return ResolutionResult(area=None, method=ResolutionMethod.NONE, confidence=ConfidenceTier.LOW)

    def resolve_structured(self, lat: Optional[float], lng: Optional[float], address_line: str,
                           subdistrict: str, district: str, province: str,
                           areas: Sequence[Area]) -> ResolutionResult:
        """Same as `resolve`, with the address composed from Thai administrative parts."""
        address = compose_structured_address(address_line, subdistrict, district, province)
        return self.resolve(lat, lng, address, areas)

    @staticmethod
    def _from_geocode(geocoded: GeocodeResult, area: Optional[Area], method: ResolutionMethod,
                      confidence: ConfidenceTier) -> ResolutionResult:
        return ResolutionResult(
            area=area,
            method=method,
            confidence=confidence,
            geocoded_lat=geocoded.latitude,
            geocoded_lng=geocoded.longitude,
            geocoded_display_name=geocoded.display_name or None,
        )


# Use lru_cache so every caller shares one agent, and with it one geocode cache.
@lru_cache()
def get_resolution_agent() -> AreaResolutionAgent:
    return AreaResolutionAgent()
