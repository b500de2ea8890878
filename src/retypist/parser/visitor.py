"""Syntax-tree traversal that collects visibility-narrowing mutations."""

from __future__ import annotations

from retypist.editor import Span
from retypist.mutation import NARROWINGS, Mutation, Visibility
from retypist.source import SourceFile

# Subtrees that never hold declarations we mutate: impl and trait members,
# function bodies (and other blocks), and macro token trees.
_SKIPPED_NODE_TYPES = frozenset({
    "impl_item",
    "trait_item",
    "block",
    "macro_invocation",
    "macro_definition",
})


def classify_visibility(node) -> Visibility:
    """Map a ``visibility_modifier`` node (or None) to a Visibility."""
    if node is None:
        return Visibility.INHERITED
    text = "".join(node.text.decode("utf-8").split())
    if text == "pub":
        return Visibility.PUBLIC
    if text in ("pub(crate)", "crate"):
        return Visibility.CRATE
    return Visibility.RESTRICTED


def _visibility_node(node):
    for child in node.children:
        if child.type == "visibility_modifier":
            return child
    return None


class Visitor:
    """Depth-first walk over one file's tree, accumulating mutations.

    Each declaration kind has its own rule; any other node is just
    descended into unless it is one of the skipped subtrees.
    """

    def __init__(self, source_file: SourceFile) -> None:
        self.source_file = source_file
        self.mutations: list[Mutation] = []
        self._source = source_file.code.encode("utf-8")
        self._rules = {
            "struct_item": self.visit_struct,
            "union_item": self.visit_struct,
            "function_item": self.visit_function,
            "enum_item": self.visit_enum,
            "enum_variant": self.visit_variant,
            "field_declaration_list": self.visit_fields,
            "field_declaration": self.visit_field,
        }

    def visit(self, node) -> None:
        rule = self._rules.get(node.type)
        if rule is not None:
            rule(node)
        elif node.type not in _SKIPPED_NODE_TYPES:
            for child in node.children:
                self.visit(child)

    def visit_struct(self, node) -> None:
        """``struct`` and ``union``: the item itself, then named fields."""
        self._add_narrowings(node)
        body = node.child_by_field_name("body")
        if body is not None and body.type == "field_declaration_list":
            self.visit_fields(body)

    def visit_function(self, node) -> None:
        self._add_narrowings(node)

    def visit_enum(self, node) -> None:
        self._add_narrowings(node)
        body = node.child_by_field_name("body")
        if body is None:
            return
        for child in body.children:
            if child.type == "enum_variant":
                self.visit_variant(child)

    def visit_variant(self, node) -> None:
        # Tuple variants carry no visibility tokens on their fields.
        body = node.child_by_field_name("body")
        if body is not None and body.type == "field_declaration_list":
            self.visit_fields(body)

    def visit_fields(self, node) -> None:
        for child in node.children:
            if child.type == "field_declaration":
                self.visit_field(child)

    def visit_field(self, node) -> None:
        self._add_narrowings(node)

    def _add_narrowings(self, node) -> None:
        vis_node = _visibility_node(node)
        ops = NARROWINGS[classify_visibility(vis_node)]
        if not ops:
            return
        span = Span.from_node(vis_node, self._source)
        self.mutations.extend(
            Mutation(source_file=self.source_file, op=op, span=span) for op in ops
        )
