"""Bounded polling for files written through an eventually consistent mount.

Objects written to cloud storage may take a while to show up (or to show
their latest version) on a locally mounted view of the bucket. Commands that
observe their effects through such a mount poll the filesystem before
trusting it.

Two modes share the same retry skeleton:

- Existence wait (`wait_for_file`): fails with `ConsistencyTimeout` once the
  attempt budget is exhausted.
- Freshness wait (`wait_for_file_update`): best effort. When the budget is
  exhausted it logs and returns, and the caller proceeds with whatever is on
  disk.
"""

from dataclasses import dataclass
from enum import Enum
import os
from pathlib import Path
import time
from typing import Callable

from loguru import logger

from mediaflow.lib.cor.errors import ConsistencyTimeout, OperationCancelled
from mediaflow.lib.cor.scope import ExecutionScope

DEFAULT_ATTEMPTS = 5
"""Number of times a path is checked before giving up."""

DEFAULT_DELAY = 10.0
"""Seconds to wait between two checks."""


class PollState(Enum):
    """States of a polling call.

    `PENDING` -> {`SUCCEEDED` | `RETRYING`} -> {`SUCCEEDED` | `EXHAUSTED` | `CANCELLED`}
    """

    PENDING = "pending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PollRequest:
    """Parameters of a single polling call.

    Args:
        path: The path to check.
        attempts: Maximum number of checks.
        delay: Seconds between two consecutive checks.
        threshold: For freshness waits, how recent (in seconds) the
            modification time must be.
    """

    path: Path
    attempts: int = DEFAULT_ATTEMPTS
    delay: float = DEFAULT_DELAY
    threshold: float | None = None

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")
        if self.threshold is not None and self.threshold <= 0:
            raise ValueError("threshold must be positive")


@dataclass(frozen=True)
class PollResult:
    """Outcome of a polling call."""

    path: Path
    state: PollState
    attempts: int
    slept: float

    @property
    def succeeded(self) -> bool:
        return self.state == PollState.SUCCEEDED


class StaleFileError(OSError):
    """The file exists but was not modified recently enough."""


type Check = Callable[[Path], OSError | None]
"""Checks a path once, returning None on success or the error observed."""


class ConsistencyPoller:
    """Fixed-interval, bounded-retry poller for filesystem paths.

    The poller blocks the calling thread between attempts. The sleep function,
    the wall clock and the stat function are injectable, so the retry loop can
    be driven by a virtual clock in tests.

    Args:
        attempts: Default number of checks per call.
        delay: Default seconds between two checks.
        sleep: Blocking sleep function. When omitted, the scope's
            interruptible wait is used if a scope is given, else `time.sleep`.
        clock: Wall clock returning epoch seconds, compared against mtimes.
        stat: Function returning an `os.stat_result` for a path.
    """

    def __init__(
        self,
        attempts: int = DEFAULT_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
        *,
        sleep: Callable[[float], None] | None = None,
        clock: Callable[[], float] = time.time,
        stat: Callable[[Path], os.stat_result] = os.stat,
    ) -> None:
        self._attempts = attempts
        self._delay = delay
        self._sleep = sleep
        self._clock = clock
        self._stat = stat

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def delay(self) -> float:
        return self._delay

    def request(
        self,
        path: str | Path,
        *,
        attempts: int | None = None,
        delay: float | None = None,
        threshold: float | None = None,
    ) -> PollRequest:
        """Build a request using this poller's defaults."""
        return PollRequest(
            path=Path(path),
            attempts=self._attempts if attempts is None else attempts,
            delay=self._delay if delay is None else delay,
            threshold=threshold,
        )

    def wait_for_file(
        self,
        path: str | Path,
        scope: ExecutionScope | None = None,
        *,
        attempts: int | None = None,
        delay: float | None = None,
    ) -> PollResult:
        """Wait until `path` exists.

        Raises:
            ConsistencyTimeout: If the path does not exist after every attempt.
                The last error observed is chained as the cause.
            OperationCancelled: If the scope is done before a retry.
        """
        request = self.request(path, attempts=attempts, delay=delay)
        result, last_error = self.poll(
            request, self._check_exists, scope, message="waiting for file to appear"
        )

        if result.state == PollState.CANCELLED:
            raise OperationCancelled(
                (scope.reason if scope else None) or f"waiting for {request.path}"
            )
        if result.state == PollState.EXHAUSTED:
            raise ConsistencyTimeout(str(request.path), result.attempts) from last_error
        return result

    def wait_for_file_update(
        self,
        path: str | Path,
        threshold: float,
        scope: ExecutionScope | None = None,
        *,
        attempts: int | None = None,
        delay: float | None = None,
    ) -> PollResult:
        """Wait until `path` was modified less than `threshold` seconds ago.

        Never raises for a stale or missing file: once the budget is exhausted
        (or the scope is done) the outcome is logged and returned, and the
        caller continues with the file currently on disk.
        """
        request = self.request(path, attempts=attempts, delay=delay, threshold=threshold)
        result, _ = self.poll(
            request,
            self._freshness_check(threshold),
            scope,
            message="waiting for file to be updated",
        )

        if result.succeeded:
            logger.info(f"File {request.path} has been updated recently.")
        elif result.state == PollState.EXHAUSTED:
            logger.warning(
                f"File {request.path} not updated after {result.attempts} attempts. "
                "Proceeding with existing file."
            )
        else:
            logger.warning(f"Stopped waiting for {request.path} to be updated: cancelled.")
        return result

    def poll(
        self,
        request: PollRequest,
        check: Check,
        scope: ExecutionScope | None = None,
        message: str = "waiting for file",
    ) -> tuple[PollResult, OSError | None]:
        """Run the retry skeleton shared by both waiting modes.

        The path is checked up to `request.attempts` times, sleeping
        `request.delay` seconds between checks (never after the last one). The
        scope, when given, is checked before every retry.

        Returns:
            The poll result and the last error returned by `check`, if any.
        """
        state = PollState.PENDING
        slept = 0.0
        last_error: OSError | None = None
        attempt = 0

        while attempt < request.attempts:
            if state == PollState.RETRYING and scope is not None and scope.done:
                return PollResult(request.path, PollState.CANCELLED, attempt, slept), last_error

            attempt += 1
            last_error = check(request.path)
            if last_error is None:
                return PollResult(request.path, PollState.SUCCEEDED, attempt, slept), None

            with logger.contextualize(path=str(request.path), attempt=attempt):
                logger.info(f"{message}: {request.path}, attempt {attempt}/{request.attempts}")

            if attempt == request.attempts:
                break

            state = PollState.RETRYING
            slept += self._wait(request.delay, scope)

        return PollResult(request.path, PollState.EXHAUSTED, attempt, slept), last_error

    def _wait(self, seconds: float, scope: ExecutionScope | None) -> float:
        """Sleep between two checks and return the seconds actually waited."""
        if self._sleep is not None:
            self._sleep(seconds)
            return seconds
        if scope is None:
            time.sleep(seconds)
            return seconds

        started = time.monotonic()
        if scope.wait(seconds):
            return seconds
        return min(seconds, time.monotonic() - started)

    def _check_exists(self, path: Path) -> OSError | None:
        try:
            self._stat(path)
        except OSError as e:
            return e
        return None

    def _freshness_check(self, threshold: float) -> Check:
        def check(path: Path) -> OSError | None:
            try:
                modified = self._stat(path).st_mtime
            except OSError as e:
                return e

            age = self._clock() - modified
            if age < threshold:
                return None
            return StaleFileError(f"{path} last modified {age:.1f}s ago")

        return check


def wait_for_file(
    path: str | Path,
    scope: ExecutionScope | None = None,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
) -> PollResult:
    """Wait for `path` to exist using a default poller.

    See `ConsistencyPoller.wait_for_file`.
    """
    return ConsistencyPoller(attempts, delay).wait_for_file(path, scope)


def wait_for_file_update(
    path: str | Path,
    threshold: float,
    scope: ExecutionScope | None = None,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
) -> PollResult:
    """Wait for `path` to be recently modified using a default poller.

    See `ConsistencyPoller.wait_for_file_update`.
    """
    return ConsistencyPoller(attempts, delay).wait_for_file_update(path, threshold, scope)
