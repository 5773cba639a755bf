"""Domain layer: pure pipeline logic with no I/O."""
