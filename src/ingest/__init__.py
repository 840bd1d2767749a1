"""Upload ingestion pipeline.

This package reads uploaded CSV objects, normalizes them into food
records, and writes them to the food table in bounded batches.
"""
