"""Food table storage adapters.

This package encodes records as native items and wraps batch writes
and dead-letter publishing behind small interfaces.
"""
