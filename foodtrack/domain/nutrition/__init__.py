"""Nutrition values, reference table and aggregation."""
