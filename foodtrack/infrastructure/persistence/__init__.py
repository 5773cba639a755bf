"""Local persistence for meals and settings."""
