"""Thread-safe loader for optional external capabilities.

A ``CapabilityLoader`` wraps a zero-argument factory (e.g. "import OpenCV
and build an adapter") in an explicit state machine::

    IDLE --load()--> LOADING --ok--> READY
                             \\--error--> FAILED --load()--> LOADING ...

Exactly one caller runs the factory.  Callers arriving while a load is in
flight poll until it settles and share its outcome; they give up with
``CapabilityLoadTimeout`` after the configured timeout.  A failed load is
reported to everyone waiting on it, and the next fresh call retries.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, Generic, TypeVar

from blurcheck.errors import CapabilityLoadTimeout, CapabilityUnavailable

logger = logging.getLogger("blurcheck.capability")

T = TypeVar("T")


class CapabilityState(str, Enum):
    """Lifecycle of a capability load."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class CapabilityLoader(Generic[T]):
    """Load a capability once and hand it to every caller.

    Parameters
    ----------
    name:
        Label used in log lines and error messages.
    factory:
        Builds the capability; any exception marks the load as failed.
    poll_interval:
        Seconds between state checks while waiting on another caller's load.
    timeout:
        Maximum seconds a waiting caller blocks.
    """

    def __init__(
        self,
        name: str,
        factory: Callable[[], T],
        poll_interval: float = 0.1,
        timeout: float = 15.0,
    ) -> None:
        self.name = name
        self._factory = factory
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._cond = threading.Condition()
        self._state = CapabilityState.IDLE
        self._capability: T | None = None
        self._failure: BaseException | None = None
        # Incremented per load attempt so waiters only observe their own outcome.
        self._attempt = 0

    @property
    def state(self) -> CapabilityState:
        with self._cond:
            return self._state

    def is_ready(self) -> bool:
        return self.state == CapabilityState.READY

    def get(self) -> T:
        """Return the capability, loading it on first use.

        Raises
        ------
        CapabilityUnavailable
            If the factory raised.
        CapabilityLoadTimeout
            If another caller's load did not settle within the timeout.
        """
        with self._cond:
            if self._state == CapabilityState.READY:
                return self._capability  # type: ignore[return-value]
            if self._state == CapabilityState.LOADING:
                attempt = self._attempt
                owner = False
            else:
                self._state = CapabilityState.LOADING
                self._attempt += 1
                attempt = self._attempt
                owner = True

        if owner:
            return self._run_factory()
        return self._wait_for(attempt)

    def reset(self) -> None:
        """Drop any loaded capability and return to ``IDLE``."""
        with self._cond:
            if self._state == CapabilityState.LOADING:
                raise RuntimeError(f"cannot reset {self.name} while it is loading")
            self._state = CapabilityState.IDLE
            self._capability = None
            self._failure = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run_factory(self) -> T:
        start = time.monotonic()
        try:
            capability = self._factory()
        except Exception as exc:
            with self._cond:
                self._state = CapabilityState.FAILED
                self._failure = exc
                self._cond.notify_all()
            logger.warning(
                "blurcheck | capability | name=%s | state=failed | detail=%s",
                self.name,
                exc,
            )
            raise CapabilityUnavailable(
                f"{self.name} failed to load: {exc}"
            ) from exc

        with self._cond:
            self._state = CapabilityState.READY
            self._capability = capability
            self._failure = None
            self._cond.notify_all()
        logger.debug(
            "blurcheck | capability | name=%s | state=ready | time=%.2fs",
            self.name,
            time.monotonic() - start,
        )
        return capability

    def _wait_for(self, attempt: int) -> T:
        deadline = time.monotonic() + self._timeout
        with self._cond:
            while True:
                if self._attempt != attempt or self._state != CapabilityState.LOADING:
                    if self._state == CapabilityState.READY:
                        return self._capability  # type: ignore[return-value]
                    raise CapabilityUnavailable(
                        f"{self.name} failed to load: {self._failure}"
                    )
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise CapabilityLoadTimeout(
                        f"timed out after {self._timeout:.1f}s waiting for "
                        f"{self.name} to load"
                    )
                self._cond.wait(timeout=min(self._poll_interval, remaining))
