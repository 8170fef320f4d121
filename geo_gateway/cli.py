#!/usr/bin/env python3
"""
Command-line interface for geo-gateway.

Usage:
    python -m geo_gateway.cli --address "1600 Pennsylvania Avenue NW, Washington, DC 20500"
    python -m geo_gateway.cli --address "10 Downing Street, London, UK" --provider google
    python -m geo_gateway.cli --compare "350 5th Ave, New York, NY 10118"
    python -m geo_gateway.cli --reviews ChIJK7PWTAelK4cRA4mU_lf0uXc --page-size 6
    python -m geo_gateway.cli --reviews ChIJK7PWTAelK4cRA4mU_lf0uXc --chunked --min-rating 4
    python -m geo_gateway.cli --batch-file addresses.csv
    python -m geo_gateway.cli --probe
"""

import argparse
import asyncio
import csv
import logging
import time
from typing import List, Optional

from geo_gateway.geocoding import compare_providers, default_registry
from geo_gateway.geocoding.batch import BatchAddress, process_large_batch
from geo_gateway.reviews import GoogleReviewsProvider, ReviewAggregator, ReviewOptions

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


async def geocode_single_address(
    address: str,
    provider: Optional[str] = None,
    verbose: bool = False
) -> None:
    """Geocode one address and print the outcome."""
    print(f"\nGeocoding: {address}")
    print(f"Provider: {provider or 'auto (census, then google)'}")
    print("-" * 50)

    outcome = await default_registry().resolve(address, provider=provider)

    if outcome.has_results:
        result = outcome.results[0]
        print(f"✓ Success via {outcome.provider}")
        print(f"  Latitude:  {result.latitude:.6f}")
        print(f"  Longitude: {result.longitude:.6f}")
        print(f"  Matched:   {result.formatted_address}")
        print(f"  Confidence: {result.confidence:.2f}")
        if len(outcome.results) > 1:
            print(f"  ({len(outcome.results) - 1} more candidates)")
        if verbose and result.raw:
            print(f"  Raw Response: {result.raw}")
    elif outcome.success:
        print(f"✗ No match found ({outcome.provider})")
    else:
        print(f"✗ Failed ({outcome.provider}): {outcome.error.code} - {outcome.error.message}")


async def compare_address(address: str) -> None:
    """Compare geocoding results from every provider."""
    print(f"\nComparing providers for: {address}")
    print("=" * 60)

    outcomes = await compare_providers(address)

    for provider, outcome in outcomes.items():
        print(f"\n{provider.upper()}:")
        if outcome.has_results:
            result = outcome.results[0]
            print(f"  Lat/Lng: {result.latitude:.6f}, {result.longitude:.6f}")
            print(f"  Matched: {result.formatted_address}")
            print(f"  Confidence: {result.confidence:.2f}")
        elif outcome.error:
            print(f"  Error: {outcome.error.code}")
        else:
            print(f"  No match")


async def show_reviews(
    place_id: str,
    chunked: bool = False,
    page_size: Optional[int] = None,
    minimum_rating: Optional[float] = None,
    cursor: Optional[str] = None,
    language: Optional[str] = None,
) -> None:
    """Print one page of reviews and the token for the next page."""
    aggregator = ReviewAggregator(GoogleReviewsProvider())
    options = ReviewOptions(
        page_size=page_size,
        language=language,
        minimum_rating=minimum_rating,
        cursor=cursor,
    )

    if chunked:
        page = await aggregator.get_reviews_chunked(place_id, options)
    else:
        page = await aggregator.get_reviews(place_id, options)

    if not page.success:
        print(f"✗ Failed: {page.error.code} - {page.error.message}")
        return

    if page.summary:
        print(f"\n{page.summary.name} ({page.summary.rating} stars, {page.summary.total_reviews} reviews)")
        print(f"  {page.summary.url}")
    print("-" * 50)

    for review in page.results:
        print(f"  [{review.rating}] {review.author} ({review.time})")
        if review.text:
            print(f"      {review.text[:120]}")

    pagination = page.pagination
    if pagination:
        if pagination.current_page is not None:
            print(f"\nPage {pagination.current_page} of {pagination.total_pages} "
                  f"({pagination.total_reviews} reviews)")
        if pagination.next_page_token:
            print(f"Next page: --cursor {pagination.next_page_token}")
        else:
            print("No more reviews")


async def probe_providers() -> None:
    """Run every availability probe."""
    registry = default_registry()
    aggregator = ReviewAggregator(GoogleReviewsProvider())

    geocoding, reviews_available = await asyncio.gather(
        registry.probe_all(),
        aggregator.is_available(),
    )

    print("\nProvider availability:")
    for name, available in geocoding.items():
        print(f"  {name}-geocoding: {'✓' if available else '✗'}")
    print(f"  {aggregator.name}-reviews: {'✓' if reviews_available else '✗'}")


def read_batch_file(path: str) -> List[BatchAddress]:
    """Read id,street,city,state,zip rows; a leading header row is skipped."""
    addresses = []
    with open(path, newline="", encoding="utf-8") as f:
        for row in csv.reader(f):
            if not row or row[0].strip().lower() == "id":
                continue
            row = row + [""] * (5 - len(row))
            addresses.append(BatchAddress(*[cell.strip() for cell in row[:5]]))
    return addresses


async def batch_geocode_file(path: str, limit: Optional[int] = None) -> None:
    """Batch geocode a CSV file through the Census batch endpoint."""
    addresses = read_batch_file(path)
    if limit:
        addresses = addresses[:limit]

    print(f"Found {len(addresses)} addresses to geocode")
    if not addresses:
        return

    start_time = time.time()
    results = await process_large_batch(addresses)
    elapsed = time.time() - start_time
    successful = sum(1 for r in results if r.matched)

    for result in results[:10]:
        if result.matched:
            print(f"  {result.id}: {result.latitude:.6f}, {result.longitude:.6f}")

    print(f"\n{'='*50}")
    print("GEOCODING SUMMARY")
    print(f"{'='*50}")
    print(f"Total addresses:       {len(addresses)}")
    print(f"Successfully geocoded: {successful}")
    print(f"Failed/No match:       {len(addresses) - successful}")
    print(f"Success rate:          {successful/len(addresses)*100:.1f}%")
    print(f"Time elapsed:          {elapsed:.1f}s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Geocoding and place review CLI"
    )

    parser.add_argument(
        "--address", "-a",
        type=str,
        help="Geocode a single address"
    )
    parser.add_argument(
        "--provider", "-p",
        type=str,
        default=None,
        choices=["census", "google"],
        help="Pin a geocoding provider (default: census with google fallback)"
    )
    parser.add_argument(
        "--compare", "-c",
        type=str,
        help="Compare all providers for an address"
    )
    parser.add_argument(
        "--reviews", "-r",
        type=str,
        metavar="PLACE_ID",
        help="Fetch one page of reviews for a place"
    )
    parser.add_argument(
        "--chunked",
        action="store_true",
        help="Use chunked pagination (with --reviews)"
    )
    parser.add_argument(
        "--page-size",
        type=int,
        help="Reviews per page (with --reviews)"
    )
    parser.add_argument(
        "--min-rating",
        type=float,
        help="Minimum star rating (with --reviews)"
    )
    parser.add_argument(
        "--cursor",
        type=str,
        help="Page token from a previous page (with --reviews)"
    )
    parser.add_argument(
        "--language",
        type=str,
        help="Review language (with --reviews)"
    )
    parser.add_argument(
        "--batch-file", "-b",
        type=str,
        help="Batch geocode a CSV of id,street,city,state,zip"
    )
    parser.add_argument(
        "--limit", "-l",
        type=int,
        help="Limit number of addresses to geocode (with --batch-file)"
    )
    parser.add_argument(
        "--probe",
        action="store_true",
        help="Check availability of every provider"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write logs to this file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose, args.log_file)

    if args.compare:
        asyncio.run(compare_address(args.compare))
    elif args.address:
        asyncio.run(geocode_single_address(args.address, args.provider, args.verbose))
    elif args.reviews:
        asyncio.run(show_reviews(
            args.reviews,
            chunked=args.chunked,
            page_size=args.page_size,
            minimum_rating=args.min_rating,
            cursor=args.cursor,
            language=args.language,
        ))
    elif args.batch_file:
        asyncio.run(batch_geocode_file(args.batch_file, args.limit))
    elif args.probe:
        asyncio.run(probe_providers())
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
