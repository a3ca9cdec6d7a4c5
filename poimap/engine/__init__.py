"""Top-level viewport engine."""
