from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from geo_gateway.geocoding.batch import (
    BatchAddress,
    BatchResult,
    format_batch_csv,
    parse_batch_csv,
    process_large_batch,
    submit_batch,
    to_outcomes,
)

SAMPLE_RESPONSE = (
    '"1","1600 Pennsylvania Ave NW, Washington, DC, 20500","Match","Exact",'
    '"1600 PENNSYLVANIA AVE NW, WASHINGTON, DC, 20500","-77.03535,38.898754","76225813","L"\n'
    '"2","1 Nowhere Rd, Faketown, ZZ, 00000","No_Match"\n'
)


def test_format_batch_csv_quotes_fields_with_commas():
    csv_text = format_batch_csv([
        BatchAddress("1", "1600 Pennsylvania Ave NW", "Washington", "DC", "20500"),
        BatchAddress("2", "Suite 5, 10 Main St", "Springfield", "IL"),
    ])
    lines = csv_text.splitlines()
    assert lines[0] == "ID,Address,City,State,ZIP"
    assert lines[1] == "1,1600 Pennsylvania Ave NW,Washington,DC,20500"
    assert lines[2] == '2,"Suite 5, 10 Main St",Springfield,IL,'


def test_parse_batch_csv():
    results = parse_batch_csv(SAMPLE_RESPONSE)

    assert len(results) == 2
    matched, unmatched = results
    assert matched.matched
    assert matched.latitude == pytest.approx(38.898754)
    assert matched.longitude == pytest.approx(-77.03535)
    assert matched.match_type == "Exact"
    assert matched.tiger_line_id == "76225813"
    assert matched.side == "L"

    assert not unmatched.matched
    assert unmatched.latitude is None
    assert unmatched.matched_address is None


def test_to_outcomes():
    outcomes = to_outcomes(parse_batch_csv(SAMPLE_RESPONSE))

    assert outcomes[0].provider == "census-batch"
    assert outcomes[0].results[0].confidence == 0.9
    assert outcomes[0].results[0].components.country == "United States"
    assert outcomes[1].error.code == "NO_MATCH"


@pytest.mark.asyncio
async def test_submit_batch_rejects_oversized_input():
    addresses = [BatchAddress(str(i), "1 Main St", "Springfield", "IL") for i in range(10_001)]
    with pytest.raises(ValueError):
        await submit_batch(addresses)


@pytest.mark.asyncio
async def test_submit_batch_empty_input_makes_no_request():
    assert await submit_batch([]) == []


@pytest.mark.asyncio
async def test_process_large_batch_skips_failed_chunks():
    addresses = [BatchAddress(str(i), f"{i} Main St", "Springfield", "IL") for i in range(5)]
    ok_chunk = [BatchResult(id="0", input_address="0 Main St", matched=True, latitude=1.0, longitude=2.0)]

    submit = AsyncMock(side_effect=[ok_chunk, aiohttp.ClientError("503"), ok_chunk])
    with patch("geo_gateway.geocoding.batch.submit_batch", new=submit), \
         patch("geo_gateway.geocoding.batch.asyncio.sleep", new=AsyncMock()) as sleep:
        results = await process_large_batch(addresses, chunk_size=2)

    assert submit.call_count == 3
    assert len(results) == 2
    assert sleep.call_count == 2
