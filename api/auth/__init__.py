"""
Caller identity for search requests.
"""
