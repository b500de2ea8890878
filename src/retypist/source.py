"""Rust source files and the crate source tree they live in."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from retypist.exceptions import (
    ConfigError,
    DiscoveryExhaustedError,
    ParseError,
    SourceError,
)

if TYPE_CHECKING:
    from retypist.mutation import Mutation

logger = logging.getLogger("retypist.source")

MANIFEST_FILE = "Cargo.toml"
SOURCE_DIR = "src"
SOURCE_EXTENSION = ".rs"


class SourceFile(BaseModel):
    """A Rust source file within a source tree.

    Code is normalized to Unix line endings as it's read in, and mutated
    files are written back with Unix line endings. The ``code`` string is
    shared by every mutation discovered in the file.
    """

    model_config = ConfigDict(frozen=True)

    path: Path  # openable: the tree root joined with tree_relative
    tree_relative: Path
    code: str = Field(repr=False)

    @classmethod
    def load(cls, tree_root: Path, tree_relative: Path) -> SourceFile:
        """Eagerly read a file from the tree."""
        full_path = Path(tree_root) / tree_relative
        try:
            code = full_path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceError(f"failed to read source of {full_path}: {e}") from e
        return cls(
            path=full_path,
            tree_relative=Path(tree_relative),
            code=code.replace("\r\n", "\n"),
        )

    def mutations(self) -> list[Mutation]:
        """Every candidate mutation in this file, in discovery order.

        Raises:
            ParseError: If the file is not valid Rust.
        """
        from retypist.parser import parse_rust
        from retypist.parser.visitor import Visitor

        tree = parse_rust(self.code)
        visitor = Visitor(self)
        visitor.visit(tree.root_node)
        return visitor.mutations

    def rewrite(self, code: str) -> None:
        """Overwrite the file on disk with ``code``."""
        try:
            self.path.write_bytes(code.encode("utf-8"))
        except OSError as e:
            raise SourceError(f"failed to write {self.path}: {e}") from e


class SourceTree:
    """A cargo crate whose ``src/**/*.rs`` files are candidates for mutation."""

    def __init__(self, root: str | Path) -> None:
        root = Path(root)
        if not (root / MANIFEST_FILE).is_file():
            raise ConfigError(
                f"{root} does not contain a {MANIFEST_FILE}: specify a crate directory"
            )
        self.root = root

    def __repr__(self) -> str:
        return f"SourceTree(root={str(self.root)!r})"

    def source_paths(self) -> list[Path]:
        """Tree-relative paths of all Rust sources, sorted."""
        source_dir = self.root / SOURCE_DIR
        paths = []
        for path in sorted(source_dir.rglob("*")):
            if not path.is_file():
                continue
            if path.suffix.lower() != SOURCE_EXTENSION:
                logger.debug("Skipping non-Rust file %s", path)
                continue
            paths.append(path.relative_to(self.root))
        return paths

    def source_files(self) -> Iterator[SourceFile]:
        """Lazily load every source file; unreadable files are skipped."""
        for tree_relative in self.source_paths():
            try:
                yield SourceFile.load(self.root, tree_relative)
            except SourceError as e:
                logger.warning("Skipping %s: %s", tree_relative, e)

    def mutations(self) -> list[Mutation]:
        """All candidate mutations across the tree, file by file."""
        found: list[Mutation] = []
        for source_file in self.source_files():
            try:
                found.extend(source_file.mutations())
            except ParseError as e:
                logger.warning("Skipping %s: %s", source_file.tree_relative, e)
        return found

    def sample_mutations(
        self,
        rng: random.Random,
        min_batch: int = 1,
        max_batch: int = 15,
    ) -> list[Mutation]:
        """Draw a random batch of mutations, at most one per span.

        Files are drawn uniformly with replacement from those that still
        have an unused candidate; each file is discovered once per call.
        When every file runs dry before the drawn size is reached, the
        smaller batch is returned.

        Raises:
            DiscoveryExhaustedError: If the tree offers no candidate at all.
        """
        paths = self.source_paths()
        if not paths:
            raise DiscoveryExhaustedError(
                f"no {SOURCE_EXTENSION} files under {self.root / SOURCE_DIR}"
            )
        total = rng.randint(min_batch, max_batch)
        batch: list[Mutation] = []
        remaining: dict[Path, list[Mutation]] = {}
        live = list(paths)
        # Every draw either fills a slot or retires a file.
        for _ in range(total + len(paths)):
            if len(batch) >= total or not live:
                break
            tree_relative = rng.choice(live)
            if tree_relative not in remaining:
                remaining[tree_relative] = self._candidates(tree_relative)
            candidates = remaining[tree_relative]
            if not candidates:
                live.remove(tree_relative)
                continue
            rng.shuffle(candidates)
            mutation = candidates.pop()
            remaining[tree_relative] = [m for m in candidates if m.span != mutation.span]
            batch.append(mutation)

        if not batch:
            raise DiscoveryExhaustedError(
                f"no mutable declarations left under {self.root / SOURCE_DIR}"
            )
        if len(batch) < total:
            logger.debug("Only %d of %d mutations available", len(batch), total)
        logger.debug("Sampled %d mutations", len(batch))
        return batch

    def _candidates(self, tree_relative: Path) -> list[Mutation]:
        try:
            return SourceFile.load(self.root, tree_relative).mutations()
        except (SourceError, ParseError) as e:
            logger.warning("Skipping %s: %s", tree_relative, e)
            return []
