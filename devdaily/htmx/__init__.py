"""HTMX fragment endpoints for the back office."""
