"""Candidate visibility-narrowing edits."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from retypist.editor import Span, replace_region
from retypist.source import SourceFile


class Visibility(str, Enum):
    """Declared visibility of an item or field."""

    PUBLIC = "public"  # pub
    CRATE = "crate"  # pub(crate), crate
    RESTRICTED = "restricted"  # pub(self), pub(super), pub(in path)
    INHERITED = "inherited"  # no modifier


class MutationOp(str, Enum):
    """A narrowing transition the campaign knows how to apply."""

    TO_VIS_CRATE = "to_vis_crate"
    TO_VIS_SELF = "to_vis_self"
    TO_VIS_SUPER = "to_vis_super"
    TO_VIS_INHERITED = "to_vis_inherited"

    @property
    def replacement(self) -> str:
        """Literal text that replaces the visibility modifier."""
        return _REPLACEMENTS[self]


_REPLACEMENTS: dict[MutationOp, str] = {
    MutationOp.TO_VIS_CRATE: "pub(crate)",
    MutationOp.TO_VIS_SELF: "pub(self)",
    MutationOp.TO_VIS_SUPER: "pub(super)",
    MutationOp.TO_VIS_INHERITED: "",
}

# Legal targets for each starting visibility, in emission order.
NARROWINGS: dict[Visibility, tuple[MutationOp, ...]] = {
    Visibility.PUBLIC: (
        MutationOp.TO_VIS_CRATE,
        MutationOp.TO_VIS_SELF,
        MutationOp.TO_VIS_SUPER,
        MutationOp.TO_VIS_INHERITED,
    ),
    Visibility.CRATE: (
        MutationOp.TO_VIS_SELF,
        MutationOp.TO_VIS_SUPER,
        MutationOp.TO_VIS_INHERITED,
    ),
    Visibility.RESTRICTED: (),
    Visibility.INHERITED: (),
}


class Mutation(BaseModel):
    """One candidate edit: replace the visibility token at ``span`` per ``op``.

    Mutations never touch the disk; :meth:`mutate` returns new file text.
    """

    model_config = ConfigDict(frozen=True)

    source_file: SourceFile
    op: MutationOp
    span: Span

    def apply_to(self, code: str) -> str:
        """Apply this edit to ``code``, which must still contain the span."""
        return replace_region(code, self.span.start, self.span.end, self.op.replacement)

    def mutate(self) -> str:
        """Return the text of the whole file with this mutation applied."""
        return self.apply_to(self.source_file.code)

    def describe(self) -> str:
        return f"{self.source_file.tree_relative}:{self.span.start} {self.op.value}"

    def __str__(self) -> str:
        return self.describe()
