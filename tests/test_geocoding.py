import pytest
from pydantic import ValidationError
from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable

from area_agent.config.settings import settings
from area_agent.services.geocode_cache import GeocodeCache
from area_agent.services.geocoding import (
    DEFAULT_IMPORTANCE, GeocodingClient, compose_structured_address, normalize_address,
)

from conftest import StubGeocoder, location


def test_normalize_address_trims_and_case_folds():
    assert normalize_address("  999 Phutthamonthon Sai 4 Rd  ") == "999 phutthamonthon sai 4 rd"


def test_geocode_returns_provider_match(client, stub_geocoder):
    stub_geocoder.results["Salaya"] = location(13.80, 100.32, importance=0.65, address="Salaya, Nakhon Pathom")
    result = client.geocode("Salaya")
    assert result.latitude == 13.80
    assert result.longitude == 100.32
    assert result.display_name == "Salaya, Nakhon Pathom"
    assert result.confidence == 0.65


def test_same_address_is_fetched_once(client, stub_geocoder):
    stub_geocoder.results["Salaya"] = location(13.80, 100.32)
    first = client.geocode("Salaya")
    second = client.geocode("Salaya")
    assert first == second
    assert stub_geocoder.geocode_calls == ["Salaya"]


def test_cache_key_ignores_case_and_surrounding_whitespace(client, stub_geocoder):
    stub_geocoder.results["Salaya"] = location(13.80, 100.32)
    client.geocode("Salaya")
    assert client.geocode("  SALAYA ") == client.geocode("salaya")
    assert len(stub_geocoder.geocode_calls) == 1


@pytest.mark.parametrize("address", ["", "   ", None])
def test_blank_address_skips_provider_and_cache(client, stub_geocoder, address):
    assert client.geocode(address) is None
    assert stub_geocoder.geocode_calls == []
    assert len(client.cache) == 0


def test_empty_result_is_none_and_not_cached(client, stub_geocoder):
    assert client.geocode("Nowhere") is None
    assert client.geocode("Nowhere") is None
    assert len(stub_geocoder.geocode_calls) == 2
    assert len(client.cache) == 0


@pytest.mark.parametrize("error", [
    GeocoderServiceError("HTTP Error 500"),
    GeocoderTimedOut("Service timed out"),
    GeocoderUnavailable("Connection refused"),
])
def test_provider_failures_become_none(error):
    stub = StubGeocoder(error=error)
    client = GeocodingClient(geocoder=stub, cache=GeocodeCache(), min_delay_seconds=0)
    assert client.geocode("Salaya") is None
    assert client.reverse_geocode(13.8, 100.32) is None
    assert len(client.cache) == 0


def test_missing_importance_defaults(client, stub_geocoder):
    stub_geocoder.results["Salaya"] = location(13.80, 100.32, importance=None)
    assert client.geocode("Salaya").confidence == DEFAULT_IMPORTANCE


def test_importance_is_clamped(client, stub_geocoder):
    stub_geocoder.results["Big"] = location(13.80, 100.32, importance=1.4)
    assert client.geocode("Big").confidence == 1.0


def test_malformed_provider_payload_is_none(client, stub_geocoder):
    stub_geocoder.results["Broken"] = location(13.80, 100.32, importance="not-a-number")
    assert client.geocode("Broken") is None
    assert len(client.cache) == 0


def test_compose_structured_address_skips_blank_parts():
    assert compose_structured_address("12 Moo 3", "", "Phutthamonthon", " Nakhon Pathom ", country="Thailand") == \
        "12 Moo 3, Phutthamonthon, Nakhon Pathom, Thailand"


def test_compose_structured_address_without_parts_is_empty():
    assert compose_structured_address("", " ", "", "", country="Thailand") == ""


def test_geocode_structured_appends_country(client, stub_geocoder):
    query = f"12 Moo 3, Salaya, Phutthamonthon, Nakhon Pathom, {settings.geocoding_country_qualifier}"
    stub_geocoder.results[query] = location(13.80, 100.32)
    result = client.geocode_structured("12 Moo 3", "Salaya", "Phutthamonthon", "Nakhon Pathom")
    assert result is not None
    assert stub_geocoder.geocode_calls == [query]


def test_reverse_geocode_is_not_cached(client, stub_geocoder):
    stub_geocoder.reverse_results[(13.8, 100.32)] = location(13.8, 100.32, address="Salaya, Thailand")
    assert client.reverse_geocode(13.8, 100.32) == "Salaya, Thailand"
    assert client.reverse_geocode(13.8, 100.32) == "Salaya, Thailand"
    assert len(stub_geocoder.reverse_calls) == 2
    assert len(client.cache) == 0


def test_reverse_geocode_without_match(client):
    assert client.reverse_geocode(0.0, 0.0) is None


def test_rate_limited_client_still_swallows_failures():
    stub = StubGeocoder(error=GeocoderServiceError("HTTP Error 503"))
    client = GeocodingClient(geocoder=stub, cache=GeocodeCache(), min_delay_seconds=0.01)
    assert client.geocode("Salaya") is None
    assert stub.geocode_calls == ["Salaya"]


def test_non_geopy_transport_errors_become_none():
    stub = StubGeocoder(error=ConnectionError("network down"))
    client = GeocodingClient(geocoder=stub, cache=GeocodeCache(), min_delay_seconds=0)
    assert client.geocode("Salaya") is None
    assert client.reverse_geocode(13.8, 100.32) is None
    assert len(client.cache) == 0


def test_cached_results_cannot_be_mutated(client, stub_geocoder):
    stub_geocoder.results["Salaya"] = location(13.80, 100.32)
    result = client.geocode("Salaya")
    with pytest.raises(ValidationError):
        result.latitude = 0.0
    assert client.geocode("salaya").latitude == 13.80
