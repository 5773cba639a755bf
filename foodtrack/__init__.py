"""
Food tracking core.

Meal-composition pipeline and local persistence for photo-based
nutrition tracking.

Structure:
- domain/: Pure business logic (composer, normalizer, validator, matchers)
- infrastructure/: External concerns (reference data source, local storage)
- application/: Context object wiring the pipeline for a presentation layer
"""

__version__ = "1.0.0"
