"""Login rate limiting with an in-memory sliding window.

Each key (client IP + login email) keeps the timestamps of its recent failed
attempts. Reaching the threshold inside the window blocks the key for a fixed
duration; a successful login clears the history.

Callers follow a two-step protocol: ``check_limit`` before the protected
operation and ``record_attempt`` after it, for both outcomes. A caller that
checks but never records leaves no trace.
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from cotador.core.config import Settings
from cotador.core.logging import get_logger

logger = get_logger(__name__)

Reason = Literal["allowed", "blocked", "limit_exceeded", "disabled"]


@dataclass(frozen=True)
class RateLimitConfig:
    """Thresholds for one protected operation."""

    max_attempts: int = 5
    window_seconds: float = 15 * 60
    block_duration_seconds: float = 15 * 60


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a limit check. Never raised, always returned."""

    allowed: bool
    remaining: int
    reset_time: float | None
    reason: Reason


@dataclass
class AttemptRecord:
    """Recent failed attempts for a key and its block deadline."""

    key: str
    attempts: list[float] = field(default_factory=list)
    blocked_until: float | None = None

    def prune(self, now: float, window_seconds: float) -> None:
        self.attempts = [t for t in self.attempts if now - t < window_seconds]


class RateLimitService:
    """Sliding-window attempt tracker keyed by an identifier."""

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or RateLimitConfig()
        self._enabled = enabled
        self._clock = clock
        self._records: dict[str, AttemptRecord] = {}

        if self._enabled:
            logger.info(
                "Rate limiting initialized",
                max_attempts=self._config.max_attempts,
                window_seconds=self._config.window_seconds,
            )
        else:
            logger.info("Rate limiting disabled")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimitService":
        return cls(
            RateLimitConfig(
                max_attempts=settings.login_max_attempts,
                window_seconds=settings.login_window_seconds,
                block_duration_seconds=settings.login_block_seconds,
            ),
            enabled=settings.login_rate_limit_enabled,
        )

    @property
    def is_enabled(self) -> bool:
        """Check if rate limiting is enabled."""
        return self._enabled

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def _record(self, key: str) -> AttemptRecord:
        record = self._records.get(key)
        if record is None:
            record = self._records[key] = AttemptRecord(key=key)
        return record

    def check_limit(self, key: str, config: RateLimitConfig | None = None) -> RateLimitResult:
        """Decide whether another attempt for ``key`` may proceed.

        Reaching the threshold here starts the block; an active block is
        reported without touching the attempt history.
        """
        if not self._enabled:
            return RateLimitResult(allowed=True, remaining=-1, reset_time=None, reason="disabled")

        settings = config or self._config
        now = self._clock()
        record = self._records.get(key)

        if record is not None and record.blocked_until is not None:
            if now < record.blocked_until:
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_time=record.blocked_until,
                    reason="blocked",
                )
            # Block elapsed: start over with an empty history
            del self._records[key]
            record = None

        if record is None:
            return RateLimitResult(
                allowed=True,
                remaining=settings.max_attempts,
                reset_time=None,
                reason="allowed",
            )

        record.prune(now, settings.window_seconds)

        if len(record.attempts) >= settings.max_attempts:
            record.blocked_until = now + settings.block_duration_seconds
            logger.warning(
                "Rate limit exceeded",
                key=key,
                attempts=len(record.attempts),
                blocked_until=record.blocked_until,
            )
            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_time=record.blocked_until,
                reason="limit_exceeded",
            )

        return RateLimitResult(
            allowed=True,
            remaining=settings.max_attempts - len(record.attempts),
            reset_time=None,
            reason="allowed",
        )

    def record_attempt(
        self, key: str, success: bool, config: RateLimitConfig | None = None
    ) -> None:
        """Record the outcome of a protected operation."""
        if not self._enabled:
            return

        if success:
            self._records.pop(key, None)
            return

        settings = config or self._config
        record = self._record(key)
        now = self._clock()
        record.attempts.append(now)
        record.prune(now, settings.window_seconds)

    def cleanup(self) -> int:
        """Drop keys with no attempt inside the window and no active block."""
        now = self._clock()
        window = self._config.window_seconds
        stale = [
            key
            for key, record in self._records.items()
            if (record.blocked_until is None or now >= record.blocked_until)
            and not any(now - t < window for t in record.attempts)
        ]
        for key in stale:
            del self._records[key]
        if stale:
            logger.debug(
                "Rate limit records cleaned",
                removed=len(stale),
                remaining=len(self._records),
            )
        return len(stale)

    def clear_attempts(self, key: str) -> None:
        """Forget everything about ``key``."""
        self._records.pop(key, None)

    def clear_all(self) -> None:
        """Forget every key."""
        self._records.clear()

    def get_stats(self, key: str) -> dict[str, object]:
        """Describe the current state of ``key`` without changing it."""
        record = self._records.get(key)
        if record is None:
            return {
                "attempts": 0,
                "blocked": False,
                "blocked_until": None,
                "remaining": self._config.max_attempts,
            }

        now = self._clock()
        recent = [t for t in record.attempts if now - t < self._config.window_seconds]
        blocked = record.blocked_until is not None and now < record.blocked_until
        return {
            "attempts": len(recent),
            "blocked": blocked,
            "blocked_until": record.blocked_until,
            "remaining": max(0, self._config.max_attempts - len(recent)),
        }

    def __len__(self) -> int:
        return len(self._records)

    # ========== Login helpers ==========

    @staticmethod
    def make_key(ip: str, email: str) -> str:
        """Build the attempt key for a client IP and login email."""
        return f"{ip}:{email}".lower()

    def check_login_limit(self, ip: str, email: str) -> RateLimitResult:
        return self.check_limit(self.make_key(ip, email))

    def record_login_attempt(self, ip: str, email: str, success: bool) -> None:
        self.record_attempt(self.make_key(ip, email), success)

    def retry_after(self, result: RateLimitResult) -> int:
        """Whole seconds until a denied key may try again."""
        if result.reset_time is None:
            return 0
        return max(1, math.ceil(result.reset_time - self._clock()))
