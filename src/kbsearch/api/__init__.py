"""HTTP API for the search core."""
