from unittest.mock import AsyncMock, patch

import pytest

from conftest import FakeGeocoder, outcome_shape, success_outcome
from geo_gateway.geocoding.base import GeocodeOutcome, GeocodingProvider
from geo_gateway.geocoding.facade import ProviderRegistry, compare_providers
from geo_gateway.geocoding.providers.census import CensusGeocoder
from geo_gateway.geocoding.providers.google import GoogleGeocoder

CENSUS_REQUEST = "geo_gateway.geocoding.providers.census.CensusGeocoder._request_json"
GOOGLE_REQUEST = "geo_gateway.geocoding.providers.google.GoogleGeocoder._request_json"


def test_fakes_and_adapters_satisfy_provider_protocol():
    assert isinstance(FakeGeocoder("x"), GeocodingProvider)
    assert isinstance(CensusGeocoder(), GeocodingProvider)
    assert isinstance(GoogleGeocoder(api_key="k"), GeocodingProvider)


def test_registry_rejects_duplicate_names():
    with pytest.raises(ValueError):
        ProviderRegistry([FakeGeocoder("census"), FakeGeocoder("census")])


@pytest.mark.asyncio
async def test_first_provider_with_results_wins():
    census = FakeGeocoder("census", success_outcome("census"))
    google = FakeGeocoder("google", success_outcome("google"))

    outcome = await ProviderRegistry([census, google]).resolve("1600 Pennsylvania Ave NW, Washington, DC")

    assert outcome.provider == "census"
    assert google.geocode_calls == []


@pytest.mark.asyncio
async def test_soft_miss_falls_through_to_next_provider():
    census = FakeGeocoder("census", GeocodeOutcome.ok("census"))
    google = FakeGeocoder("google", success_outcome("google"))

    outcome = await ProviderRegistry([census, google]).resolve("Somewhere")

    assert outcome.provider == "google"
    assert outcome.has_results
    assert len(census.geocode_calls) == 1


@pytest.mark.asyncio
async def test_unavailable_provider_is_skipped_without_geocoding():
    census = FakeGeocoder("census", success_outcome("census"), available=False)
    google = FakeGeocoder("google", success_outcome("google"))

    outcome = await ProviderRegistry([census, google]).resolve("anything")

    assert outcome.provider == "google"
    assert census.geocode_calls == []


@pytest.mark.asyncio
async def test_probe_exception_counts_as_unavailable():
    census = FakeGeocoder("census", success_outcome("census"), probe_raises=RuntimeError("boom"))
    google = FakeGeocoder("google", success_outcome("google"))

    outcome = await ProviderRegistry([census, google]).resolve("anything")

    assert outcome.provider == "google"


@pytest.mark.asyncio
async def test_all_failing_reports_last_error_under_multiple():
    census = FakeGeocoder("census", GeocodeOutcome.failure("census", "CENSUS_ERROR", "down"))
    google = FakeGeocoder("google", GeocodeOutcome.failure("google", "OVER_QUERY_LIMIT", "quota"))

    outcome = await ProviderRegistry([census, google]).resolve("anything")

    assert not outcome.success
    assert outcome.provider == "multiple"
    assert outcome.results == ()
    assert outcome.error.code == "OVER_QUERY_LIMIT"


@pytest.mark.asyncio
async def test_all_empty_reports_all_providers_failed():
    registry = ProviderRegistry([
        FakeGeocoder("census", GeocodeOutcome.ok("census")),
        FakeGeocoder("google", GeocodeOutcome.ok("google")),
    ])

    outcome = await registry.resolve("anything")

    assert outcome.provider == "multiple"
    assert outcome.error.code == "ALL_PROVIDERS_FAILED"


@pytest.mark.asyncio
async def test_provider_exception_is_recorded_and_never_raised():
    census = FakeGeocoder("census", raises=RuntimeError("unexpected"))
    google = FakeGeocoder("google", available=False)

    outcome = await ProviderRegistry([census, google]).resolve("anything")

    assert outcome.provider == "multiple"
    assert outcome.error.code == "PROVIDER_ERROR"


@pytest.mark.asyncio
async def test_explicit_provider_has_no_fallback():
    census = FakeGeocoder("census", GeocodeOutcome.ok("census"))
    google = FakeGeocoder("google", success_outcome("google"))

    outcome = await ProviderRegistry([census, google]).resolve("anything", provider="census")

    assert outcome.provider == "census"
    assert outcome.success
    assert outcome.results == ()
    assert google.geocode_calls == []
    assert google.probe_calls == 0


@pytest.mark.asyncio
async def test_explicit_failure_is_returned_verbatim():
    census = FakeGeocoder("census", GeocodeOutcome.failure("census", "NON_US_ADDRESS", "US only"))
    google = FakeGeocoder("google", success_outcome("google"))

    outcome = await ProviderRegistry([census, google]).resolve("anything", provider="census")

    assert outcome.provider == "census"
    assert outcome.error.code == "NON_US_ADDRESS"


@pytest.mark.asyncio
async def test_explicit_unknown_and_unavailable():
    registry = ProviderRegistry([
        FakeGeocoder("census", available=False),
        FakeGeocoder("google"),
    ])

    unknown = await registry.resolve("anything", provider="bing")
    assert unknown.error.code == "PROVIDER_NOT_FOUND"
    assert unknown.provider == "bing"

    unavailable = await registry.resolve("anything", provider="census")
    assert unavailable.error.code == "PROVIDER_UNAVAILABLE"


@pytest.mark.asyncio
async def test_select_provider():
    census = FakeGeocoder("census", available=False)
    google = FakeGeocoder("google")
    registry = ProviderRegistry([census, google])

    assert await registry.select_provider("anything") is google
    assert await registry.select_provider("anything", explicit_name="census") is census
    assert await registry.select_provider("anything", explicit_name="other") is None
    assert await ProviderRegistry([census]).select_provider("anything") is None


@pytest.mark.asyncio
async def test_probe_all():
    registry = ProviderRegistry([
        FakeGeocoder("census", available=False),
        FakeGeocoder("google", probe_raises=RuntimeError("boom")),
    ])
    assert await registry.probe_all() == {"census": False, "google": False}


@pytest.mark.asyncio
async def test_us_address_resolves_with_free_provider(census_match, google_result):
    """A US address is answered by Census; Google is never geocoded."""
    census_payload = {"result": {"addressMatches": [census_match]}}
    google_mock = AsyncMock(return_value={"status": "OK", "results": [google_result]})

    with patch(CENSUS_REQUEST, new=AsyncMock(return_value=census_payload)), \
         patch(GOOGLE_REQUEST, new=google_mock):
        registry = ProviderRegistry([CensusGeocoder(), GoogleGeocoder(api_key="test-key")])
        outcome = await registry.resolve("1600 Pennsylvania Avenue NW, Washington, DC 20500")

    assert outcome.provider == "census"
    assert outcome.results[0].latitude == pytest.approx(38.898754)
    google_mock.assert_not_called()


@pytest.mark.asyncio
async def test_foreign_address_falls_back_to_google(census_match, google_result):
    """Census is healthy but refuses a UK address, so Google answers."""
    census_payload = {"result": {"addressMatches": [census_match]}}
    london = dict(google_result, formatted_address="10 Downing St, London SW1A 2AA, UK")

    with patch(CENSUS_REQUEST, new=AsyncMock(return_value=census_payload)), \
         patch(GOOGLE_REQUEST, new=AsyncMock(return_value={"status": "OK", "results": [london]})):
        registry = ProviderRegistry([CensusGeocoder(), GoogleGeocoder(api_key="test-key")])
        outcome = await registry.resolve("10 Downing Street, London, UK")

    assert outcome.success
    assert outcome.provider == "google"
    assert outcome.results[0].formatted_address == "10 Downing St, London SW1A 2AA, UK"


@pytest.mark.asyncio
async def test_outcomes_have_identical_shape_across_providers(census_match, google_result):
    with patch(CENSUS_REQUEST, new=AsyncMock(return_value={"result": {"addressMatches": [census_match]}})), \
         patch(GOOGLE_REQUEST, new=AsyncMock(return_value={"status": "OK", "results": [google_result]})):
        census = await CensusGeocoder().geocode("1600 Pennsylvania Avenue NW, Washington, DC 20500")
        google = await GoogleGeocoder(api_key="test-key").geocode("1600 Pennsylvania Avenue NW, Washington, DC 20500")

    assert outcome_shape(census) == outcome_shape(google)
    assert set(census.as_dict()) == set(google.as_dict()) == {"success", "provider", "results"}


@pytest.mark.asyncio
async def test_compare_providers_runs_each_provider():
    census = FakeGeocoder("census", success_outcome("census", 38.8977, -77.0365))
    google = FakeGeocoder("google", success_outcome("google", 38.8976, -77.0366))

    results = await compare_providers("anything", registry=ProviderRegistry([census, google]))

    assert set(results) == {"census", "google"}
    assert results["census"].provider == "census"
    assert results["google"].provider == "google"
