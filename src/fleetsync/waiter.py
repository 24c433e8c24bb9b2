"""Polls a caller-supplied status source until a resource settles."""

import logging
import time
from collections.abc import Callable, Hashable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fleetsync.errors import UnexpectedStateError, WaitError, WaitTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0


class StatusKind(Enum):
    """How a single observed status is interpreted by a wait."""

    PENDING = "pending"
    TARGET = "target"
    FAILURE = "failure"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Probe:
    """One observation of a resource: the fetched value and its status label.

    ``status`` may be ``None`` when the resource could not be found yet.
    ``reason`` carries failure detail, e.g. the status message the remote
    side attached to a failed resource.
    """

    value: Any
    status: str | None
    reason: str | None = None


Refresh = Callable[[], Probe]


@dataclass(frozen=True)
class WaitSpec:
    """Immutable description of a single wait.

    Status sets accept any iterable of strings (``StrEnum`` members included)
    and are frozen on construction. The three sets must be pairwise disjoint.
    """

    target: frozenset[str]
    refresh: Refresh
    timeout: float
    pending: frozenset[str] = frozenset()
    failure: frozenset[str] = frozenset()
    description: str = "resource"

    def __post_init__(self):
        for name in ("target", "pending", "failure"):
            object.__setattr__(self, name, frozenset(getattr(self, name)))

        if not self.target:
            raise ValueError("Wait target set must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"Wait timeout must be positive, got {self.timeout!r}")

        overlaps = (
            (self.pending & self.target)
            | (self.pending & self.failure)
            | (self.target & self.failure)
        )
        if overlaps:
            raise ValueError(
                f"Status sets must be disjoint, overlapping: {sorted(overlaps)}"
            )

    def classify(self, status: str | None) -> StatusKind:
        if status in self.target:
            return StatusKind.TARGET
        if status in self.failure:
            return StatusKind.FAILURE
        if status in self.pending:
            return StatusKind.PENDING
        return StatusKind.UNRECOGNIZED


@dataclass(frozen=True)
class WaitOutcome:
    """Result of one wait run by ``StateWaiter.wait_many``."""

    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StateWaiter:
    """Blocks until a ``WaitSpec`` resolves to success, failure or timeout.

    ``sleep`` and ``clock`` default to the real ones and are injectable so
    that callers (and tests) can drive time themselves.
    """

    def __init__(
        self,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if poll_interval < 0:
            raise ValueError(f"Poll interval must not be negative, got {poll_interval!r}")
        self._poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    def wait(self, spec: WaitSpec) -> Any:
        """Poll ``spec.refresh`` until the observed status settles.

        Returns the value of the probe that reported a target status.

        Raises:
            UnexpectedStateError: A failure status was observed.
            WaitTimeoutError: The timeout elapsed first.
            Exception: Whatever ``spec.refresh`` raised, unchanged.
        """
        deadline = self._clock() + spec.timeout
        attempt = 0

        while True:
            attempt += 1
            probe = spec.refresh()
            kind = spec.classify(probe.status)
            logger.debug(
                "Probe %d for %s: status=%r (%s)",
                attempt,
                spec.description,
                probe.status,
                kind.value,
            )

            if kind is StatusKind.TARGET:
                return probe.value
            if kind is StatusKind.FAILURE:
                logger.warning(
                    "%s entered failure state %r: %s",
                    spec.description,
                    probe.status,
                    probe.reason,
                )
                raise UnexpectedStateError(probe.status, probe.value, probe.reason)
            if kind is StatusKind.UNRECOGNIZED and probe.status is not None:
                logger.warning(
                    "Unrecognized status %r for %s, still waiting",
                    probe.status,
                    spec.description,
                )

            remaining = deadline - self._clock()
            if remaining <= 0:
                logger.warning(
                    "Timed out after %.1fs waiting for %s (last status %r)",
                    spec.timeout,
                    spec.description,
                    probe.status,
                )
                raise WaitTimeoutError(probe.status, probe.value, spec.timeout)

            if self._poll_interval > 0:
                self._sleep(min(self._poll_interval, remaining))

    def wait_many(
        self,
        specs: Mapping[Hashable, WaitSpec],
        max_concurrent: int = 5,
    ) -> dict[Hashable, WaitOutcome]:
        """Run independent waits concurrently, keyed like ``specs``."""
        if not specs:
            return {}

        outcomes: dict[Hashable, WaitOutcome] = {}

        with ThreadPoolExecutor(max_workers=max_concurrent) as executor:
            futures = {executor.submit(self.wait, spec): key for key, spec in specs.items()}
            for future in as_completed(futures):
                key = futures[future]
                try:
                    outcomes[key] = WaitOutcome(value=future.result())
                except WaitError as exc:
                    outcomes[key] = WaitOutcome(error=exc)
                except Exception as exc:
                    logger.exception("Failed waiting for %s", specs[key].description)
                    outcomes[key] = WaitOutcome(error=exc)

        return outcomes


def wait_for_state(
    refresh: Refresh,
    target: Iterable[str],
    timeout: float,
    pending: Iterable[str] = (),
    failure: Iterable[str] = (),
    description: str = "resource",
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> Any:
    """Build a ``WaitSpec`` and wait on it with a default ``StateWaiter``."""
    spec = WaitSpec(
        target=frozenset(target),
        refresh=refresh,
        timeout=timeout,
        pending=frozenset(pending),
        failure=frozenset(failure),
        description=description,
    )
    return StateWaiter(poll_interval=poll_interval).wait(spec)
