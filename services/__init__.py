"""Session management services."""
