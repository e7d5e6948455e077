"""HTTP adapter for live coverage sessions."""
