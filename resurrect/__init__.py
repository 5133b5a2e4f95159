"""Archived project restoration engine."""
