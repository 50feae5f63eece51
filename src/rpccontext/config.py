"""
Configuration management for client-wide call defaults.

Supports configuration via environment variables and .env files.
"""

from datetime import timedelta
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rpccontext.rpc.retry import RetrySettings
from rpccontext.rpc.status import StatusCode


class CallContextConfig(BaseSettings):
    """
    Client-wide defaults from which the default call context is built.

    All settings can be configured via environment variables with the
    RPC_CONTEXT_ prefix. Mapping and list settings are read as JSON.
    """

    model_config = SettingsConfigDict(
        env_prefix="RPC_CONTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Call defaults
    default_timeout_seconds: Optional[float] = Field(
        default=None,
        ge=0,
        description="Per-call timeout applied to every call (unset or 0 disables it)"
    )
    default_headers: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Extra headers sent with every call"
    )

    # Retry settings
    retry_total_timeout_seconds: float = Field(
        default=600.0,
        ge=0,
        description="Overall time budget across all attempts"
    )
    retry_initial_delay_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Delay before the first retry"
    )
    retry_delay_multiplier: float = Field(
        default=1.3,
        ge=1.0,
        description="Growth factor of the delay between attempts"
    )
    retry_max_delay_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Upper bound for the delay between attempts"
    )
    retry_max_attempts: int = Field(
        default=0,
        ge=0,
        description="Maximum attempts (0 = bounded by the total timeout only)"
    )
    retry_jittered: bool = Field(
        default=True,
        description="Randomize delays between attempts"
    )
    retry_initial_rpc_timeout_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Timeout of the first attempt"
    )
    retry_rpc_timeout_multiplier: float = Field(
        default=1.0,
        ge=1.0,
        description="Growth factor of the attempt timeout"
    )
    retry_max_rpc_timeout_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Upper bound for the attempt timeout"
    )
    retryable_codes: List[StatusCode] = Field(
        default_factory=lambda: [StatusCode.UNAVAILABLE, StatusCode.DEADLINE_EXCEEDED],
        description="Status codes that allow a retry"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def default_timeout(self) -> Optional[timedelta]:
        """Get the default per-call timeout, or None when disabled."""
        if not self.default_timeout_seconds:
            return None
        return timedelta(seconds=self.default_timeout_seconds)

    @property
    def retry_settings(self) -> RetrySettings:
        """Get the retry policy described by the retry_* settings."""
        return RetrySettings(
            total_timeout=timedelta(seconds=self.retry_total_timeout_seconds),
            initial_retry_delay=timedelta(seconds=self.retry_initial_delay_seconds),
            retry_delay_multiplier=self.retry_delay_multiplier,
            max_retry_delay=timedelta(seconds=self.retry_max_delay_seconds),
            max_attempts=self.retry_max_attempts,
            jittered=self.retry_jittered,
            initial_rpc_timeout=timedelta(seconds=self.retry_initial_rpc_timeout_seconds),
            rpc_timeout_multiplier=self.retry_rpc_timeout_multiplier,
            max_rpc_timeout=timedelta(seconds=self.retry_max_rpc_timeout_seconds),
        )


# Global config instance
_config: Optional[CallContextConfig] = None


def get_config() -> CallContextConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = CallContextConfig()
    return _config


def set_config(config: Optional[CallContextConfig]) -> None:
    """Set the global configuration instance (None resets it)."""
    global _config
    _config = config
