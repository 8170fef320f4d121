"""
geo-gateway: unified geocoding and place review API.

Packages:
- core: configuration, in-memory TTL cache, shared utilities
- geocoding: canonical result types, Census/Google adapters, provider selector
- reviews: review types, Google review adapter, cursor codec, aggregator
- places: Google place lookup helpers
"""

__version__ = "1.0.0"
