"""Nutrition reference data loading."""
