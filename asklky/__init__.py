"""Ask LKY: a persona-constrained retrieval-augmented chat core."""

__version__ = "0.1.0"
