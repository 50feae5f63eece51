"""
Retry settings value.

Describes the retry policy of a call: attempt budget, backoff curve
between attempts and per-attempt timeouts. The retry executor that
consumes these settings lives outside this package.
"""

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class RetrySettings:
    """
    Immutable retry policy for a call.

    Attributes:
        total_timeout: Overall time budget across all attempts (zero = unbounded)
        initial_retry_delay: Delay before the first retry
        retry_delay_multiplier: Growth factor applied to the delay after each retry
        max_retry_delay: Upper bound for the delay between attempts
        max_attempts: Maximum number of attempts (zero = bounded by total_timeout only)
        jittered: Whether delays are randomized
        initial_rpc_timeout: Timeout of the first attempt
        rpc_timeout_multiplier: Growth factor applied to the attempt timeout
        max_rpc_timeout: Upper bound for the attempt timeout
    """

    total_timeout: timedelta = timedelta(0)
    initial_retry_delay: timedelta = timedelta(0)
    retry_delay_multiplier: float = 1.0
    max_retry_delay: timedelta = timedelta(0)
    max_attempts: int = 0
    jittered: bool = True
    initial_rpc_timeout: timedelta = timedelta(0)
    rpc_timeout_multiplier: float = 1.0
    max_rpc_timeout: timedelta = timedelta(0)

    def __post_init__(self):
        """Validate the policy."""
        for name in (
            "total_timeout",
            "initial_retry_delay",
            "max_retry_delay",
            "initial_rpc_timeout",
            "max_rpc_timeout",
        ):
            if getattr(self, name) < timedelta(0):
                raise ValueError(f"{name} must not be negative")

        if self.retry_delay_multiplier < 1.0:
            raise ValueError("retry_delay_multiplier must be at least 1.0")
        if self.rpc_timeout_multiplier < 1.0:
            raise ValueError("rpc_timeout_multiplier must be at least 1.0")
        if self.max_attempts < 0:
            raise ValueError("max_attempts must not be negative")
        if self.max_retry_delay < self.initial_retry_delay:
            raise ValueError("max_retry_delay must not be less than initial_retry_delay")
        if self.max_rpc_timeout < self.initial_rpc_timeout:
            raise ValueError("max_rpc_timeout must not be less than initial_rpc_timeout")

    @classmethod
    def no_retries(cls, rpc_timeout: timedelta = timedelta(0)) -> "RetrySettings":
        """
        Create settings that make exactly one attempt.

        Args:
            rpc_timeout: Timeout of the single attempt (zero disables it)
        """
        return cls(
            total_timeout=rpc_timeout,
            max_attempts=1,
            initial_rpc_timeout=rpc_timeout,
            max_rpc_timeout=rpc_timeout,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "total_timeout_seconds": self.total_timeout.total_seconds(),
            "initial_retry_delay_seconds": self.initial_retry_delay.total_seconds(),
            "retry_delay_multiplier": self.retry_delay_multiplier,
            "max_retry_delay_seconds": self.max_retry_delay.total_seconds(),
            "max_attempts": self.max_attempts,
            "jittered": self.jittered,
            "initial_rpc_timeout_seconds": self.initial_rpc_timeout.total_seconds(),
            "rpc_timeout_multiplier": self.rpc_timeout_multiplier,
            "max_rpc_timeout_seconds": self.max_rpc_timeout.total_seconds(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RetrySettings":
        """
        Create settings from the dictionary form produced by ``to_dict``.

        Missing keys keep their defaults.
        """
        durations = {
            "total_timeout_seconds": "total_timeout",
            "initial_retry_delay_seconds": "initial_retry_delay",
            "max_retry_delay_seconds": "max_retry_delay",
            "initial_rpc_timeout_seconds": "initial_rpc_timeout",
            "max_rpc_timeout_seconds": "max_rpc_timeout",
        }
        kwargs = {}
        for key, value in data.items():
            if key in durations:
                kwargs[durations[key]] = timedelta(seconds=value)
            elif key in ("retry_delay_multiplier", "rpc_timeout_multiplier"):
                kwargs[key] = float(value)
            elif key == "max_attempts":
                kwargs[key] = int(value)
            elif key == "jittered":
                kwargs[key] = bool(value)
            else:
                raise ValueError(f"Unknown retry setting: {key}")
        return cls(**kwargs)
