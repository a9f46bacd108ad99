"""Settings and API token verification."""
