"""Database infrastructure."""
