"""Clone, export and import MongoDB databases."""

__version__ = "0.1.0"
