"""CSV report output."""
