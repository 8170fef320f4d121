import pytest

from geo_gateway.core.utils.address import looks_like_us_address, mask_secret, normalize_address
from geo_gateway.core.utils.geo import haversine_distance, is_within_bounds


@pytest.mark.parametrize("address", [
    "1600 Pennsylvania Avenue NW, Washington, DC 20500",
    "350 5th Ave, New York, NY 10118",
    "1 Main Street",
    "Springfield 62701",
    "Somewhere ambiguous",
    "",
    "123 King Street, London, KY, USA",
])
def test_us_or_ambiguous_addresses_are_treated_as_us(address):
    assert looks_like_us_address(address) is True


@pytest.mark.parametrize("address", [
    "10 Downing Street, London, UK",
    "1 Rue de Rivoli, Paris, France",
    "24 Sussex Drive, Ottawa, Canada",
    "Unter den Linden 77, Berlin, Germany",
])
def test_addresses_naming_another_country_are_not_us(address):
    assert looks_like_us_address(address) is False


def test_lowercase_words_are_not_read_as_state_codes():
    # "de" would be Delaware if matched case-insensitively
    assert looks_like_us_address("5 rue de la Paix, Paris, France") is False


def test_normalize_address_collapses_whitespace_and_commas():
    assert normalize_address("  123  Main St ,  Springfield ,IL ") == "123 Main St, Springfield, IL"
    assert normalize_address(None) == ""


def test_mask_secret():
    assert mask_secret(None) == "none"
    assert mask_secret("short") == "***"
    assert mask_secret("abcd1234efgh5678") == "abcd...5678"


def test_haversine_distance_is_symmetric_and_zero_for_same_point():
    d1 = haversine_distance(38.8977, -77.0365, 40.7484, -73.9857)
    d2 = haversine_distance(40.7484, -73.9857, 38.8977, -77.0365)
    assert d1 == pytest.approx(d2)
    assert 320_000 < d1 < 340_000
    assert haversine_distance(1.0, 1.0, 1.0, 1.0) == 0


def test_is_within_bounds():
    assert is_within_bounds(38.9, -77.0, south=38.0, west=-78.0, north=39.0, east=-76.0)
    assert not is_within_bounds(40.0, -77.0, south=38.0, west=-78.0, north=39.0, east=-76.0)
