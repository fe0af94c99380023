"""Classify security-relevant events in raw log text."""
