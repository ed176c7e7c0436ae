"""
request guarding for provider calls, plus logging setup.

a provider call can go wrong in two different ways:
- transport trouble (connection errors, timeouts, 429 and 5xx raised as
  ConnectionError) says something about the service. it is retried with
  backoff, and enough exhausted requests in a row suspend the provider
  for a cooldown.
- a malformed payload says something about one paper only. it is raised
  to the caller at once and never counts against the provider.

suspension is per build: GraphBuilder calls provider.start_build(), which
resets the guard, so one bad build never empties the next one.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar

from .config import ProviderConfig


logger = logging.getLogger("citegraph")

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

TRANSIENT_ERRORS: Tuple[type, ...] = (ConnectionError, TimeoutError, OSError)


class MalformedPayloadError(ValueError):
    """provider answered, but the body is not what we expected."""


class ProviderUnavailableError(ConnectionError):
    """the provider is suspended after repeated transport failures."""


@dataclass
class RequestPolicy:
    """retry and suspension settings for one provider."""
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    jitter: bool = True

    # exhausted requests in a row before the provider is suspended
    failure_threshold: int = 5
    cooldown_seconds: float = 60.0

    transient_errors: Tuple[type, ...] = TRANSIENT_ERRORS

    @classmethod
    def for_provider(
        cls,
        config: ProviderConfig,
        base_delay: float,
        extra_transient: Tuple[type, ...] = ()
    ) -> 'RequestPolicy':
        """policy from provider config; extra_transient adds client-library errors."""
        return cls(
            max_attempts=config.max_attempts,
            base_delay=base_delay,
            max_delay=max(base_delay * 30, 30.0),
            failure_threshold=config.failure_threshold,
            cooldown_seconds=config.cooldown_seconds,
            transient_errors=TRANSIENT_ERRORS + tuple(extra_transient)
        )

    def backoff(self, attempt: int) -> float:
        """seconds to wait after a failed attempt (1-based)."""
        delay = min(self.base_delay * 2 ** (attempt - 1), self.max_delay)
        if self.jitter:
            delay *= 0.5 + random.random()
        return delay


@dataclass
class ProviderHealth:
    """consecutive exhausted requests and the suspension they trigger."""
    failure_threshold: int = 5
    cooldown_seconds: float = 60.0
    consecutive_failures: int = 0
    suspended_until: Optional[float] = None

    @property
    def suspended(self) -> bool:
        return self.suspended_until is not None

    def available(self, now: float) -> bool:
        if self.suspended_until is None:
            return True
        if now < self.suspended_until:
            return False
        # cooldown over: one more failure suspends again
        self.suspended_until = None
        self.consecutive_failures = max(self.failure_threshold - 1, 0)
        return True

    def record_success(self):
        self.consecutive_failures = 0

    def record_failure(self, now: float) -> bool:
        """count one exhausted request; true if this one suspended the provider."""
        self.consecutive_failures += 1
        if self.suspended_until is None and self.consecutive_failures >= self.failure_threshold:
            self.suspended_until = now + self.cooldown_seconds
            return True
        return False

    def reset(self):
        self.consecutive_failures = 0
        self.suspended_until = None


class RequestGuard:
    """
    runs one provider request under a RequestPolicy.

    call() returns the operation's result or raises its last error, so the
    MetadataClient decides how to degrade. while the provider is suspended
    call() raises ProviderUnavailableError without touching the network.
    """

    def __init__(
        self,
        name: str,
        policy: Optional[RequestPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        self.name = name
        self.policy = policy or RequestPolicy()
        self.health = ProviderHealth(
            failure_threshold=self.policy.failure_threshold,
            cooldown_seconds=self.policy.cooldown_seconds
        )
        self._sleep = sleep
        self._clock = clock

        # stats
        self.requests = 0
        self.succeeded = 0
        self.retries = 0
        self.transport_failures = 0
        self.bad_payloads = 0
        self.skipped = 0

    def call(self, operation: Callable[[], T], label: str = "request") -> T:
        self.requests += 1
        if not self.health.available(self._clock()):
            self.skipped += 1
            raise ProviderUnavailableError(f"[{self.name}] suspended, skipping {label}")

        attempts = max(self.policy.max_attempts, 1)
        attempt = 0
        while True:
            attempt += 1
            try:
                result = operation()

            except MalformedPayloadError:
                # the service answered; only this paper is affected
                self.bad_payloads += 1
                self.health.record_success()
                raise

            except self.policy.transient_errors as e:
                if attempt >= attempts:
                    self._give_up(label, attempt, e)
                    raise
                self.retries += 1
                delay = self.policy.backoff(attempt)
                logger.info(f"[{self.name}] {label} attempt {attempt} failed, retrying in {delay:.1f}s")
                self._sleep(delay)

            else:
                self.health.record_success()
                self.succeeded += 1
                return result

    def _give_up(self, label: str, attempt: int, error: Exception):
        self.transport_failures += 1
        logger.warning(f"[{self.name}] {label} failed after {attempt} attempts: {error}")
        if self.health.record_failure(self._clock()):
            logger.warning(
                f"[{self.name}] {self.health.consecutive_failures} requests failed in a row, "
                f"suspending for {self.health.cooldown_seconds:.0f}s"
            )

    def reset(self):
        """lift any suspension; counters are kept."""
        if self.health.suspended:
            logger.info(f"[{self.name}] suspension lifted for new build")
        self.health.reset()

    def stats(self) -> dict:
        return {
            "name": self.name,
            "requests": self.requests,
            "succeeded": self.succeeded,
            "retries": self.retries,
            "transport_failures": self.transport_failures,
            "bad_payloads": self.bad_payloads,
            "skipped": self.skipped,
            "suspended": self.health.suspended
        }


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    http_level: int = logging.WARNING
) -> logging.Logger:
    """
    configure the citegraph logger.
    httpx logs every request at info, http_level keeps that quiet.
    calling again replaces the earlier handlers.
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    logging.getLogger("httpx").setLevel(http_level)
    return logger
