from types import SimpleNamespace

import pytest

from area_agent.agent.resolution_core import AreaResolutionAgent
from area_agent.models.schemas import Area, AreaGeometry
from area_agent.services.geocode_cache import GeocodeCache
from area_agent.services.geocoding import GeocodingClient


def square(lat0: float, lng0: float, size: float):
    return [
        (lat0, lng0),
        (lat0, lng0 + size),
        (lat0 + size, lng0 + size),
        (lat0 + size, lng0),
    ]


def make_area(area_id: str, ring, name: str = None) -> Area:
    return Area(id=area_id, name=name or area_id, geometry=AreaGeometry(coordinates=[ring]))


def location(lat: float, lng: float, importance=0.8, address: str = "Somewhere"):
    raw = {"lat": str(lat), "lon": str(lng), "display_name": address}
    if importance is not None:
        raw["importance"] = importance
    return SimpleNamespace(latitude=lat, longitude=lng, address=address, raw=raw)


class StubGeocoder:
    """Stands in for a geopy geocoder and counts the calls it receives."""

    def __init__(self, results=None, reverse_results=None, error=None):
        self.results = results or {}
        self.reverse_results = reverse_results or {}
        self.error = error
        self.geocode_calls = []
        self.reverse_calls = []

    def geocode(self, query, exactly_one=True, **kwargs):
        self.geocode_calls.append(query)
        if self.error is not None:
            raise self.error
        return self.results.get(query)

    def reverse(self, query, exactly_one=True, **kwargs):
        self.reverse_calls.append(query)
        if self.error is not None:
            raise self.error
        return self.reverse_results.get(tuple(query))


@pytest.fixture
def area_a():
    return make_area("area-a", square(0.0, 0.0, 10.0), name="Area A")


@pytest.fixture
def area_b():
    return make_area("area-b", square(20.0, 20.0, 10.0), name="Area B")


@pytest.fixture
def areas(area_a, area_b):
    return [area_a, area_b]


@pytest.fixture
def stub_geocoder():
    return StubGeocoder()


@pytest.fixture
def client(stub_geocoder):
    return GeocodingClient(geocoder=stub_geocoder, cache=GeocodeCache(max_entries=16), min_delay_seconds=0)


@pytest.fixture
def agent(client):
    return AreaResolutionAgent(geocoding_client=client)
