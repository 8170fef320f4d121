"""
US Census batch geocoding.

The Census batch endpoint accepts a CSV upload of up to 10,000 addresses and
returns a CSV of matches, which makes it the cheapest way to geocode a large
address list.
"""

import asyncio
import csv
import io
import logging
from dataclasses import asdict, dataclass
from typing import List, Literal, Optional, Sequence

import aiohttp

from geo_gateway.core import settings
from geo_gateway.geocoding.base import (
    AddressComponents,
    GeocodeOutcome,
    GeocodeResult,
    GeocodingError,
)

logger = logging.getLogger(__name__)

ReturnType = Literal["locations", "geographies"]

BATCH_PROVIDER_NAME = "census-batch"


@dataclass(frozen=True)
class BatchAddress:
    id: str
    street: str
    city: str
    state: str
    zip: str = ""


@dataclass(frozen=True)
class BatchResult:
    id: str
    input_address: str
    matched: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    matched_address: Optional[str] = None
    match_type: Optional[str] = None
    tiger_line_id: Optional[str] = None
    side: Optional[str] = None


def format_batch_csv(addresses: Sequence[BatchAddress]) -> str:
    """Required format: Unique ID, Street address, City, State, ZIP"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["ID", "Address", "City", "State", "ZIP"])
    for addr in addresses:
        writer.writerow([addr.id, addr.street, addr.city, addr.state, addr.zip or ""])
    return buffer.getvalue()


def parse_batch_csv(text: str) -> List[BatchResult]:
    """
    Parse the Census batch response.

    Columns: id, input address, Match/No_Match/Tie, match type (Exact/Non_Exact),
    matched address, "lng,lat", TIGER line id, side. The response has no header row.
    """
    results: List[BatchResult] = []

    for row in csv.reader(io.StringIO(text.strip())):
        if not row or not row[0].strip():
            continue
        if row[0].strip().lower() == "id":
            continue
        if len(row) < 3:
            logger.debug(f"Census batch: Skipping short row {row}")
            continue

        row = row + [""] * (8 - len(row))
        record_id, input_address, match_flag, match_type, matched_address, coordinates, tiger_id, side = row[:8]
        matched = match_flag.strip() == "Match"

        latitude = longitude = None
        if matched and coordinates:
            try:
                lng, lat = coordinates.split(",")
                latitude, longitude = float(lat), float(lng)
            except ValueError:
                logger.warning(f"Census batch: Bad coordinates for {record_id}: {coordinates}")

        results.append(BatchResult(
            id=record_id,
            input_address=input_address,
            matched=matched,
            latitude=latitude,
            longitude=longitude,
            matched_address=(matched_address or input_address) if matched else None,
            match_type=match_type or None,
            tiger_line_id=tiger_id or None,
            side=side or None,
        ))

    return results


async def submit_batch(
    addresses: Sequence[BatchAddress],
    return_type: ReturnType = "locations",
    benchmark: str = "Public_AR_Current",
    timeout: Optional[float] = None,
) -> List[BatchResult]:
    """
    Submit up to 10,000 addresses in a single Census batch request.

    Raises:
        ValueError: More rows than the Census batch limit
        GeocodingError: Non-200 response from the batch endpoint
    """
    if not addresses:
        return []

    if len(addresses) > settings.CENSUS_BATCH_MAX_ROWS:
        raise ValueError(
            f"Maximum {settings.CENSUS_BATCH_MAX_ROWS} addresses allowed per batch"
        )

    form = aiohttp.FormData()
    form.add_field(
        "addressFile",
        format_batch_csv(addresses),
        filename="addresses.csv",
        content_type="text/csv",
    )
    form.add_field("benchmark", benchmark)
    if return_type == "geographies":
        form.add_field("vintage", "Current_Current")

    url = f"{settings.CENSUS_BASE_URL}/{return_type}/addressbatch"
    client_timeout = aiohttp.ClientTimeout(total=timeout or settings.HTTP_TIMEOUT * 10)

    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        async with session.post(url, data=form) as response:
            if response.status != 200:
                raise GeocodingError(
                    f"Census Batch API error: {response.status} {response.reason}",
                    provider=BATCH_PROVIDER_NAME,
                    code="CENSUS_ERROR",
                )
            text = await response.text()

    return parse_batch_csv(text)


async def process_large_batch(
    addresses: Sequence[BatchAddress],
    chunk_size: int = 10_000,
    return_type: ReturnType = "locations",
    benchmark: str = "Public_AR_Current",
) -> List[BatchResult]:
    """
    Split a large address list into batch-sized chunks and submit them in turn.

    A chunk that fails is logged and skipped; the remaining chunks still run.
    """
    chunk_size = max(1, min(chunk_size, settings.CENSUS_BATCH_MAX_ROWS))
    total_chunks = (len(addresses) + chunk_size - 1) // chunk_size
    results: List[BatchResult] = []

    for index, start in enumerate(range(0, len(addresses), chunk_size), start=1):
        chunk = addresses[start:start + chunk_size]
        logger.info(f"Processing batch {index} of {total_chunks} ({len(chunk)} addresses)")

        try:
            results.extend(await submit_batch(chunk, return_type, benchmark))
        except (aiohttp.ClientError, asyncio.TimeoutError, GeocodingError) as e:
            logger.error(f"Error processing batch starting at index {start}: {e}")

        if start + chunk_size < len(addresses):
            await asyncio.sleep(settings.CENSUS_BATCH_DELAY)

    return results


def to_outcomes(results: Sequence[BatchResult]) -> List[GeocodeOutcome]:
    """Convert batch rows to the standard outcome shape, one per input row."""
    outcomes = []
    for result in results:
        if result.matched and result.latitude is not None and result.longitude is not None:
            outcomes.append(GeocodeOutcome.ok(BATCH_PROVIDER_NAME, [
                GeocodeResult(
                    latitude=result.latitude,
                    longitude=result.longitude,
                    formatted_address=result.matched_address or result.input_address,
                    confidence=0.9,
                    components=AddressComponents(country="United States"),
                    raw=asdict(result),
                )
            ]))
        else:
            outcomes.append(GeocodeOutcome.failure(
                BATCH_PROVIDER_NAME,
                "NO_MATCH",
                "Address could not be matched",
            ))
    return outcomes
