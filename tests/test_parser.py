"""Tests for Rust parsing and mutation discovery."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import pytest

from conftest import SAMPLE_MUTATION_COUNT
from retypist.editor import LineColumn, Span
from retypist.exceptions import ParseError
from retypist.mutation import MutationOp, Visibility
from retypist.parser import is_available, parse_rust
from retypist.parser.visitor import classify_visibility
from retypist.source import SourceFile

PUBLIC_OPS = [
    MutationOp.TO_VIS_CRATE,
    MutationOp.TO_VIS_SELF,
    MutationOp.TO_VIS_SUPER,
    MutationOp.TO_VIS_INHERITED,
]
CRATE_OPS = [
    MutationOp.TO_VIS_SELF,
    MutationOp.TO_VIS_SUPER,
    MutationOp.TO_VIS_INHERITED,
]


def source_file(code: str, name: str = "lib.rs") -> SourceFile:
    return SourceFile(path=Path("/crate/src") / name, tree_relative=Path("src") / name, code=code)


def span(line: int, column: int, end_line: int, end_column: int) -> Span:
    return Span(
        start=LineColumn(line=line, column=column),
        end=LineColumn(line=end_line, column=end_column),
    )


def visibility_texts(code: str) -> Counter:
    """Count the text of every visibility modifier anywhere in the file."""
    found: Counter = Counter()

    def walk(node):
        if node.type == "visibility_modifier":
            found[node.text.decode("utf-8")] += 1
        for child in node.children:
            walk(child)

    walk(parse_rust(code).root_node)
    return found


class TestParseRust:
    def test_available(self):
        assert is_available()

    def test_parses_valid_source(self, sample_rust_source: str):
        tree = parse_rust(sample_rust_source)
        assert tree.root_node.type == "source_file"
        assert not tree.root_node.has_error

    def test_syntax_error(self):
        with pytest.raises(ParseError):
            parse_rust("pub struct {\n")

    def test_empty_file(self):
        assert parse_rust("").root_node.child_count == 0


class TestClassifyVisibility:
    @pytest.mark.parametrize(
        "code, expected",
        [
            ("pub fn f() {}", Visibility.PUBLIC),
            ("pub(crate) fn f() {}", Visibility.CRATE),
            ("pub( crate ) fn f() {}", Visibility.CRATE),
            ("pub(self) fn f() {}", Visibility.RESTRICTED),
            ("pub(super) fn f() {}", Visibility.RESTRICTED),
            ("pub(in crate::a) fn f() {}", Visibility.RESTRICTED),
        ],
    )
    def test_modifiers(self, code: str, expected: Visibility):
        function = parse_rust(code).root_node.children[0]
        modifier = function.children[0]
        assert modifier.type == "visibility_modifier"
        assert classify_visibility(modifier) == expected

    def test_missing_modifier_is_inherited(self):
        assert classify_visibility(None) == Visibility.INHERITED


class TestVisitor:
    def test_total_count(self, sample_rust_source: str):
        mutations = source_file(sample_rust_source).mutations()
        assert len(mutations) == SAMPLE_MUTATION_COUNT

    def test_discovery_order_and_spans(self, sample_rust_source: str):
        mutations = source_file(sample_rust_source).mutations()
        starts = []
        for m in mutations:
            position = (m.span.start.line, m.span.start.column)
            if position not in starts:
                starts.append(position)
        # Point, x, y, Pair, Shape, area, nested::inner
        assert starts == [(5, 1), (6, 5), (7, 5), (11, 1), (13, 1), (18, 1), (32, 5)]

    def test_public_struct_yields_four(self, sample_rust_source: str):
        mutations = source_file(sample_rust_source).mutations()
        point = [m for m in mutations if m.span == span(5, 1, 5, 4)]
        assert [m.op for m in point] == PUBLIC_OPS

    def test_crate_field_yields_three(self, sample_rust_source: str):
        mutations = source_file(sample_rust_source).mutations()
        y = [m for m in mutations if m.span.start.line == 7]
        assert [m.op for m in y] == CRATE_OPS
        assert y[0].span == span(7, 5, 7, 15)

    def test_tuple_struct_fields_skipped(self, sample_rust_source: str):
        mutations = source_file(sample_rust_source).mutations()
        pair = [m for m in mutations if m.span.start.line == 11]
        assert [m.op for m in pair] == CRATE_OPS
        assert {m.span for m in pair} == {span(11, 1, 11, 11)}

    def test_skips_impl_bodies_and_private_items(self, sample_rust_source: str):
        lines = {m.span.start.line for m in source_file(sample_rust_source).mutations()}
        # helper (19), private_helper (23), Point::new (26), restricted (34)
        assert lines.isdisjoint({19, 23, 26, 34})

    def test_no_visibility_yields_nothing(self):
        assert source_file("fn f() {}\nstruct S { a: u8 }\nenum E { A }\n").mutations() == []

    def test_enum_variant_fields(self):
        code = "enum E {\n    A { pub f: u8 },\n    B(u8),\n}\n"
        mutations = source_file(code).mutations()
        assert [m.op for m in mutations] == PUBLIC_OPS
        assert mutations[0].span == span(2, 9, 2, 12)

    def test_union_fields(self):
        code = "pub union U {\n    pub a: u32,\n    b: f32,\n}\n"
        mutations = source_file(code).mutations()
        assert len(mutations) == 8

    def test_multibyte_columns(self):
        mutations = source_file("/* é */ pub fn f() {}\n").mutations()
        assert mutations[0].span == span(1, 9, 1, 12)

    def test_discovery_is_stable(self, sample_rust_source: str):
        sf = source_file(sample_rust_source)
        assert sf.mutations() == sf.mutations()

    def test_mutations_share_source(self, sample_rust_source: str):
        sf = source_file(sample_rust_source)
        assert all(m.source_file is sf for m in sf.mutations())

    def test_applied_mutation_only_changes_its_token(self, sample_rust_source: str):
        before = visibility_texts(sample_rust_source)
        for mutation in source_file(sample_rust_source).mutations():
            token = sample_rust_source.split("\n")[mutation.span.start.line - 1][
                mutation.span.start.column - 1 : mutation.span.end.column - 1
            ]
            expected = before.copy()
            expected[token] -= 1
            if mutation.op.replacement:
                expected[mutation.op.replacement] += 1
            assert visibility_texts(mutation.mutate()) == +expected, str(mutation)

    def test_struct_and_field_scenario(self):
        code = "pub struct Foo { pub x: i32 }\n"
        mutations = source_file(code).mutations()
        assert len(mutations) == 8
        assert {m.span for m in mutations[:4]} == {span(1, 1, 1, 4)}
        assert {m.span for m in mutations[4:]} == {span(1, 18, 1, 21)}
        inherited = mutations[3]
        assert inherited.op == MutationOp.TO_VIS_INHERITED
        assert inherited.mutate() == " struct Foo { pub x: i32 }\n"
