"""Run collaborator processes with interrupt-aware polling."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from enum import Enum
from pathlib import Path

from retypist.exceptions import Cancelled, LaunchError, TerminateError
from retypist.interrupt import CancellationToken

logger = logging.getLogger("retypist.process")

# How often to check whether the child finished, in seconds.
WAIT_POLL_INTERVAL = 0.05


class ProcessResult(str, Enum):
    """Outcome of a collaborator that ran to completion."""

    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def success(self) -> bool:
        return self is ProcessResult.SUCCESS


class ProcessGroupTerminator:
    """Send SIGTERM to the child's whole process group (POSIX)."""

    new_session = True

    def terminate(self, child: subprocess.Popen) -> None:
        try:
            # The child leads its own session, so its pgid is its pid.
            os.killpg(child.pid, signal.SIGTERM)
        except ProcessLookupError:
            # raced with the child exiting
            return
        except OSError as e:
            raise TerminateError(f"failed to terminate child {child.pid}: {e}") from e
        child.wait()


class NativeTerminator:
    """Platform terminate call on the child alone (non-POSIX)."""

    new_session = False

    def terminate(self, child: subprocess.Popen) -> None:
        try:
            child.terminate()
        except OSError as e:
            if child.poll() is not None:
                return
            raise TerminateError(f"failed to terminate child {child.pid}: {e}") from e
        child.wait()


def default_terminator():
    if os.name == "posix":
        return ProcessGroupTerminator()
    return NativeTerminator()


class ProcessRunner:
    """Spawns collaborators and waits for them without blocking cancellation.

    stdin is closed, stdout is inherited and stderr is merged into stdout.
    """

    def __init__(
        self,
        cancel: CancellationToken,
        poll_interval: float = WAIT_POLL_INTERVAL,
        terminator=None,
    ) -> None:
        self.cancel = cancel
        self.poll_interval = poll_interval
        self.terminator = terminator or default_terminator()

    def run(
        self,
        argv: list[str],
        cwd: str | Path,
        env: dict[str, str] | None = None,
    ) -> ProcessResult:
        """Run ``argv`` in ``cwd`` to completion.

        Raises:
            LaunchError: If the process could not be spawned.
            Cancelled: If cancellation was requested before it exited; the
                child's process group has been terminated and reaped.
        """
        self.cancel.check()
        logger.debug("Running %s in %s", " ".join(argv), cwd)
        child_env = None
        if env:
            child_env = {**os.environ, **env}
        try:
            child = subprocess.Popen(
                argv,
                cwd=str(cwd),
                env=child_env,
                stdin=subprocess.DEVNULL,
                stdout=None,
                stderr=subprocess.STDOUT,
                start_new_session=self.terminator.new_session,
            )
        except OSError as e:
            raise LaunchError(argv, e) from e

        while True:
            if self.cancel.cancelled:
                logger.debug("Terminating %s (pid %d)", argv[0], child.pid)
                self.terminator.terminate(child)
                raise Cancelled()
            try:
                returncode = child.wait(timeout=self.poll_interval)
            except subprocess.TimeoutExpired:
                continue
            break

        if returncode == 0:
            return ProcessResult.SUCCESS
        logger.debug("%s exited with status %d", argv[0], returncode)
        return ProcessResult.FAILURE
