"""
Address heuristics and normalization utilities.

Usage:
    from geo_gateway.core.utils.address import looks_like_us_address

    looks_like_us_address("1600 Pennsylvania Avenue NW, Washington, DC 20500")  # True
    looks_like_us_address("10 Downing Street, London, UK")  # False
    looks_like_us_address("Somewhere ambiguous")  # True (assume US)
"""

import re
from typing import Optional

# Two-letter codes, including DC and Puerto Rico
US_STATE_CODES = [
    'AL', 'AK', 'AZ', 'AR', 'CA', 'CO', 'CT', 'DE', 'FL', 'GA',
    'HI', 'ID', 'IL', 'IN', 'IA', 'KS', 'KY', 'LA', 'ME', 'MD',
    'MA', 'MI', 'MN', 'MS', 'MO', 'MT', 'NE', 'NV', 'NH', 'NJ',
    'NM', 'NY', 'NC', 'ND', 'OH', 'OK', 'OR', 'PA', 'RI', 'SC',
    'SD', 'TN', 'TX', 'UT', 'VT', 'VA', 'WA', 'WV', 'WI', 'WY',
    'DC', 'PR',
]

# Matched against the raw text: state codes only count when written in capitals,
# so "Rue de Rivoli" does not read as Delaware.
STATE_CODE_PATTERN = re.compile(r'\b(' + '|'.join(US_STATE_CODES) + r')\b')

ZIP_CODE_PATTERN = re.compile(r'\b\d{5}(?:-\d{4})?\b')

US_COUNTRY_PATTERN = re.compile(
    r'\b(USA|U\.S\.A|U\.S|US|UNITED STATES(?: OF AMERICA)?)\b',
    re.IGNORECASE
)

NON_US_COUNTRY_PATTERN = re.compile(
    r'\b(CANADA|MEXICO|UK|U\.K|UNITED KINGDOM|GREAT BRITAIN|ENGLAND|SCOTLAND|'
    r'WALES|IRELAND|FRANCE|GERMANY|DEUTSCHLAND|SPAIN|ITALY|NETHERLANDS|'
    r'AUSTRALIA|NEW ZEALAND|JAPAN|CHINA|INDIA|BRAZIL)\b',
    re.IGNORECASE
)

STREET_SUFFIX_PATTERN = re.compile(
    r'\b(STREET|AVENUE|BOULEVARD|ROAD|LANE|DRIVE|PARKWAY|'
    r'ST|AVE|BLVD|RD|LN|DR|PKWY)\b',
    re.IGNORECASE
)


def looks_like_us_address(address: str) -> bool:
    """
    Best-effort check that an address is in the United States.

    Used by the free Census geocoder to avoid a wasted network call on
    clearly foreign input. Ambiguous input is assumed to be US so the free
    tier is always tried first.

    Precedence:
    1. Capitalized US state code, or an explicit US country token -> US
    2. Explicit non-US country/region token -> not US
    3. ZIP / ZIP+4 code, or a common US street suffix -> US
    4. Anything else -> US

    Args:
        address: Free-form address text

    Returns:
        False only when the address names a non-US country and carries
        no US state code or US country token

    Example:
        >>> looks_like_us_address("350 5th Ave, New York, NY 10118")
        True
        >>> looks_like_us_address("1 Rue de Rivoli, Paris, France")
        False
    """
    if not address:
        return True

    if STATE_CODE_PATTERN.search(address) or US_COUNTRY_PATTERN.search(address):
        return True

    if NON_US_COUNTRY_PATTERN.search(address):
        return False

    if ZIP_CODE_PATTERN.search(address) or STREET_SUFFIX_PATTERN.search(address):
        return True

    return True


def normalize_address(address: Optional[str]) -> str:
    """
    Collapse whitespace and stray separators in a free-form address.

    Example:
        >>> normalize_address("  123  Main St ,  Springfield ,IL ")
        "123 Main St, Springfield, IL"
    """
    if not address:
        return ""

    addr = ' '.join(address.split())
    addr = re.sub(r'\s*,\s*', ', ', addr)
    return addr.strip(' ,')


def mask_secret(value: Optional[str]) -> str:
    """Mask an API key for logging, keeping the first and last four characters."""
    if not value:
        return "none"
    if len(value) <= 8:
        return "***"
    return f"{value[:4]}...{value[-4:]}"
