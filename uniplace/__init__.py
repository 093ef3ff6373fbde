"""UniPlace placement cell backend."""

__version__ = "1.0.0"
