"""Tree-sitter based Rust parsing."""

from __future__ import annotations

from functools import lru_cache

from retypist.exceptions import ParseError


@lru_cache(maxsize=1)
def _get_language():
    """Get the tree-sitter Language object for Rust."""
    import tree_sitter_rust
    from tree_sitter import Language

    return Language(tree_sitter_rust.language())


def is_available() -> bool:
    """Check if tree-sitter and the Rust grammar are importable."""
    try:
        import tree_sitter  # noqa: F401
        import tree_sitter_rust  # noqa: F401
    except ImportError:
        return False
    return True


def parse_rust(source: str):
    """Parse Rust source text into a tree-sitter tree.

    Raises:
        ParseError: If the grammar reports any syntax error in the file.
    """
    from tree_sitter import Parser

    parser = Parser(_get_language())
    tree = parser.parse(source.encode("utf-8"))
    if tree.root_node.has_error:
        raise ParseError(f"tree-sitter parse error near {_first_error(tree.root_node)}")
    return tree


def _first_error(node) -> str:
    """Describe the location of the first ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        row, column = node.start_point[0], node.start_point[1]
        return f"line {row + 1}, byte column {column + 1}"
    for child in node.children:
        if child.has_error:
            return _first_error(child)
    return "unknown location"
