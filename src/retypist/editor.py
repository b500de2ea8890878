"""Positions, spans, and exact-region text replacement."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from retypist.exceptions import SpanError


class LineColumn(BaseModel):
    """A 1-based (line, column) position, with the column counted in characters."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=1)
    column: int = Field(ge=1)

    @classmethod
    def from_point(cls, source: bytes, byte_offset: int, point) -> LineColumn:
        """Build a position from a tree-sitter byte offset and (row, byte column) point.

        Tree-sitter reports columns in bytes; multi-byte characters earlier on
        the line would shift a byte column to the right of the real character.
        """
        row, byte_column = point[0], point[1]
        line_start = byte_offset - byte_column
        prefix = source[line_start:byte_offset].decode("utf-8", errors="replace")
        return cls(line=row + 1, column=len(prefix) + 1)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class Span(BaseModel):
    """A contiguous text region in one file.

    ``start`` is the first character of the region and ``end`` the position
    just past its last character, so a span with ``start == end`` is empty.
    """

    model_config = ConfigDict(frozen=True)

    start: LineColumn
    end: LineColumn

    @model_validator(mode="after")
    def _check_order(self) -> Span:
        if (self.end.line, self.end.column) < (self.start.line, self.start.column):
            raise ValueError(f"span end {self.end} precedes start {self.start}")
        return self

    @classmethod
    def from_node(cls, node, source: bytes) -> Span:
        """The span covering exactly the text of a tree-sitter node."""
        return cls(
            start=LineColumn.from_point(source, node.start_byte, node.start_point),
            end=LineColumn.from_point(source, node.end_byte, node.end_point),
        )

    @property
    def sort_key(self) -> tuple[int, int, int, int]:
        return (self.start.line, self.start.column, self.end.line, self.end.column)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def _offset(lines: list[str], position: LineColumn) -> int:
    if position.line > len(lines):
        raise SpanError(
            f"line {position.line} is past the end of a {len(lines)}-line document"
        )
    line_text = lines[position.line - 1]
    # len + 1 addresses the newline (or end of document) after the line.
    if position.column > len(line_text) + 1:
        raise SpanError(
            f"column {position.column} is past the end of line {position.line} "
            f"({len(line_text)} characters)"
        )
    return sum(len(line) + 1 for line in lines[: position.line - 1]) + position.column - 1


def replace_region(
    document: str, start: LineColumn, end: LineColumn, replacement: str
) -> str:
    """Return ``document`` with the text from ``start`` up to ``end`` replaced.

    Every character outside the region is carried over unchanged. When
    ``start == end`` nothing is removed and ``replacement`` is inserted.

    Raises:
        SpanError: If either position does not exist in the document or
            ``end`` precedes ``start``.
    """
    lines = document.split("\n")
    begin = _offset(lines, start)
    finish = _offset(lines, end)
    if finish < begin:
        raise SpanError(f"region end {end} precedes start {start}")
    return document[:begin] + replacement + document[finish:]
