"""Domain layer: pure vote protocol code with no I/O."""
