"""Top-level filemerge commands."""
