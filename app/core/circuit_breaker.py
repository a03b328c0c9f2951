"""
Circuit breaker guarding calls to key provider APIs.
"""
import logging
import time
from enum import Enum
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, Tuple, Type
from app.config import settings

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"  # Calls pass through
    OPEN = "open"  # Calls fail fast
    HALF_OPEN = "half_open"  # Probing whether the provider recovered


class CircuitBreakerOpenException(Exception):
    """Raised instead of calling the provider while the circuit is open."""

    def __init__(self, message: str = "Circuit breaker is open"):
        self.message = message
        super().__init__(self.message)


class CircuitBreaker:
    """
    Fail fast after repeated provider failures.

    After failure_threshold consecutive failures the circuit opens. Once
    recovery_timeout seconds have passed, up to half_open_max_calls trial
    calls are let through; that many successes close the circuit again,
    a single failure reopens it.

    Usage:
        breaker = CircuitBreaker(name="openai")
        response = await breaker.call(client.get, url)
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: Optional[int] = None,
        recovery_timeout: Optional[int] = None,
        half_open_max_calls: Optional[int] = None,
        excluded_exceptions: Tuple[Type[BaseException], ...] = (),
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold or settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD
        self.recovery_timeout = recovery_timeout or settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT
        self.half_open_max_calls = half_open_max_calls or settings.CIRCUIT_BREAKER_HALF_OPEN_MAX_CALLS
        self.excluded_exceptions = excluded_exceptions
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._half_open_calls = 0
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def _transition(self, state: CircuitState) -> None:
        self._state = state
        self._success_count = 0
        self._half_open_calls = 0
        if state == CircuitState.OPEN:
            self._opened_at = self._clock()
        elif state == CircuitState.CLOSED:
            self._failure_count = 0
            self._opened_at = None
        logger.info(f"Circuit breaker '{self.name}' is now {state.value}")

    def _before_call(self) -> None:
        if self._state == CircuitState.OPEN:
            if self._clock() - (self._opened_at or 0) < self.recovery_timeout:
                raise CircuitBreakerOpenException(
                    f"Circuit breaker '{self.name}' is open. Retry after {self.recovery_timeout}s"
                )
            self._transition(CircuitState.HALF_OPEN)

        if self._state == CircuitState.HALF_OPEN:
            if self._half_open_calls >= self.half_open_max_calls:
                raise CircuitBreakerOpenException(
                    f"Circuit breaker '{self.name}' half-open call limit reached"
                )
            self._half_open_calls += 1

    def _on_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.half_open_max_calls:
                self._transition(CircuitState.CLOSED)
        else:
            self._failure_count = 0

    def _on_failure(self, exc: BaseException) -> None:
        if isinstance(exc, self.excluded_exceptions):
            return

        self._failure_count += 1
        if self._state == CircuitState.HALF_OPEN:
            logger.warning(f"Circuit breaker '{self.name}' trial call failed: {exc}")
            self._transition(CircuitState.OPEN)
        elif self._failure_count >= self.failure_threshold:
            logger.warning(
                f"Circuit breaker '{self.name}' opening after {self._failure_count} failures"
            )
            self._transition(CircuitState.OPEN)

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Await func through the breaker.

        Raises:
            CircuitBreakerOpenException: If the circuit is open
            Exception: Whatever func raises
        """
        self._before_call()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def __call__(self, func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        """Decorator form of call()."""
        @wraps(func)
        async def wrapper(*args, **kwargs):
            return await self.call(func, *args, **kwargs)
        return wrapper

    def reset(self) -> None:
        """Force the circuit closed."""
        self._transition(CircuitState.CLOSED)

    def get_status(self) -> dict:
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "failure_threshold": self.failure_threshold,
            "recovery_timeout": self.recovery_timeout,
        }


openai_circuit_breaker = CircuitBreaker(name="openai_api")
