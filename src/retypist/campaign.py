"""The reset, sample, apply, validate, commit-or-revert loop."""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from enum import Enum
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel

from retypist.config import RunConfig
from retypist.exceptions import LaunchError, SourceError, VcsError
from retypist.mutation import Mutation
from retypist.process import ProcessResult
from retypist.source import SourceTree

logger = logging.getLogger("retypist.campaign")


class BuildTool(Protocol):
    """Builds and tests the crate; see :class:`retypist.cargo.Cargo`."""

    def test(self, root: Path) -> ProcessResult: ...

    def fmt(self, root: Path) -> ProcessResult: ...


class VersionControl(Protocol):
    """Restores or records the working tree; see :class:`retypist.git.Git`."""

    def reset(self, root: Path) -> ProcessResult: ...

    def discard(self, root: Path) -> ProcessResult: ...

    def commit(self, root: Path, message: str) -> ProcessResult: ...


class CampaignState(str, Enum):
    CLEAN = "clean"
    MUTATING = "mutating"
    VALIDATING = "validating"
    COMMITTING = "committing"
    REVERTING = "reverting"


class IterationOutcome(str, Enum):
    PASSED = "pass"
    FAILED = "fail"
    ERROR = "error"


class CampaignStats(BaseModel):
    """Counters accumulated over a campaign."""

    iterations: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    mutations_committed: int = 0


def apply_mutations(mutations: list[Mutation]) -> list[Path]:
    """Write every mutation to disk, one write per file.

    Edits to the same file are applied last-span-first so earlier spans
    stay valid. Returns the paths written, in first-seen order.
    """
    by_path: dict[Path, list[Mutation]] = defaultdict(list)
    for mutation in mutations:
        by_path[mutation.source_file.path].append(mutation)
    for group in by_path.values():
        source_file = group[0].source_file
        code = source_file.code
        for mutation in sorted(group, key=lambda m: m.span.sort_key, reverse=True):
            code = mutation.apply_to(code)
        source_file.rewrite(code)
    return list(by_path)


class Campaign:
    """Drives the mutation campaign over one source tree.

    ``cargo`` and ``git`` are the collaborators the loop drives.
    """

    def __init__(
        self,
        tree: SourceTree,
        cargo: BuildTool,
        git: VersionControl,
        config: RunConfig | None = None,
        console=None,
        rng: random.Random | None = None,
    ) -> None:
        self.tree = tree
        self.cargo = cargo
        self.git = git
        self.config = config or RunConfig()
        self.console = console
        self.rng = rng or random.Random(self.config.seed)
        self.state = CampaignState.CLEAN
        self.stats = CampaignStats()

    @property
    def root(self) -> Path:
        return self.tree.root

    def run(self) -> CampaignStats:
        """Loop until ``max_iterations`` is reached, or forever.

        Cancelled, DiscoveryExhaustedError, SpanError and VcsError
        propagate out of the loop.
        """
        while (
            self.config.max_iterations is None
            or self.stats.iterations < self.config.max_iterations
        ):
            self.run_iteration()
        return self.stats

    def run_iteration(self) -> IterationOutcome:
        iteration = self.stats.iterations + 1
        self._restore("reset")
        self.state = CampaignState.CLEAN

        batch = self.tree.sample_mutations(
            self.rng,
            min_batch=self.config.min_batch,
            max_batch=self.config.max_batch,
        )
        if self.console:
            self.console.show_batch(iteration, batch)

        self.state = CampaignState.MUTATING
        try:
            apply_mutations(batch)
        except SourceError as e:
            logger.error("Applying mutations failed: %s", e)
            return self._finish(iteration, IterationOutcome.ERROR, batch)

        self.state = CampaignState.VALIDATING
        try:
            result = self.cargo.test(self.root)
        except LaunchError as e:
            logger.error("%s", e)
            return self._finish(iteration, IterationOutcome.ERROR, batch)

        if not result.success:
            return self._finish(iteration, IterationOutcome.FAILED, batch)

        self.state = CampaignState.COMMITTING
        if self.config.format:
            self._format()
        try:
            committed = self._commit()
        except LaunchError as e:
            logger.error("%s", e)
            committed = False
        if not committed:
            return self._finish(iteration, IterationOutcome.ERROR, batch)
        return self._finish(iteration, IterationOutcome.PASSED, batch)

    def _commit(self) -> bool:
        result = self.git.commit(self.root, self.config.commit_message)
        if not result.success:
            logger.error("git commit failed")
        return result.success

    def _format(self) -> None:
        try:
            result = self.cargo.fmt(self.root)
        except LaunchError as e:
            logger.warning("Formatting skipped: %s", e)
            return
        if not result.success:
            logger.warning("cargo fmt failed; committing unformatted code")

    def _restore(self, how: str) -> None:
        """Return the working tree to the last commit, or raise VcsError."""
        restore = self.git.reset if how == "reset" else self.git.discard
        try:
            result = restore(self.root)
        except LaunchError as e:
            raise VcsError(f"git {how} failed: {e}") from e
        if not result.success:
            raise VcsError(f"git {how} failed in {self.root}")

    def _finish(
        self, iteration: int, outcome: IterationOutcome, batch: list[Mutation]
    ) -> IterationOutcome:
        if outcome is not IterationOutcome.PASSED:
            self.state = CampaignState.REVERTING
            self._restore("discard")
        self.state = CampaignState.CLEAN

        self.stats.iterations += 1
        if outcome is IterationOutcome.PASSED:
            self.stats.passed += 1
            self.stats.mutations_committed += len(batch)
        elif outcome is IterationOutcome.FAILED:
            self.stats.failed += 1
        else:
            self.stats.errors += 1
        logger.debug("Iteration %d: %s", iteration, outcome.value)
        if self.console:
            self.console.iteration_status(iteration, outcome.value)
        return outcome
