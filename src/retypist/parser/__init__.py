"""Rust parsing and mutation discovery for retypist."""

from retypist.parser.tree_sitter_parser import is_available, parse_rust

__all__ = [
    "is_available",
    "parse_rust",
]
