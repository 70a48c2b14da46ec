"""Migrate hand-maintained files onto templates and overrides."""
