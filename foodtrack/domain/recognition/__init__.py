"""Classifier label to canonical food mapping."""
