"""retypist - tighten Rust visibility one validated batch at a time."""

__version__ = "0.1.0"
