"""
HTTP surface for geo-gateway.
"""
