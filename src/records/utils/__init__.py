"""Input validation and plain-text table helpers."""
