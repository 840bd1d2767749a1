"""Change-stream observation.

This package projects committed food items from the table's change
stream into structured log events.
"""
