"""Function entry points.

This package adapts trigger payloads to the ingest pipeline and the
change observer, resolving configuration once per process.
"""
