"""Meal composition, editing and validation."""
