"""Stream transformation services."""
