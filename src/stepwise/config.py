"""Runtime configuration for the progress manager and terminal view."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(slots=True)
class Settings:
    """Render cadence, color and failure policy settings."""

    poll_interval_ms: int = 100
    color: bool | None = None
    unit_timeout_seconds: float = 0.0
    exit_code_on_failure: int = 1

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def timeout_seconds(self) -> float | None:
        return self.unit_timeout_seconds or None

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment, falling back to defaults."""

        color = _env_optional_bool("STEPWISE_COLOR")
        if color is None and os.getenv("NO_COLOR"):
            color = False
        return cls(
            poll_interval_ms=int(os.getenv("STEPWISE_POLL_INTERVAL_MS", "100")),
            color=color,
            unit_timeout_seconds=float(os.getenv("STEPWISE_UNIT_TIMEOUT_SECONDS", "0")),
            exit_code_on_failure=int(os.getenv("STEPWISE_FAILURE_EXIT_CODE", "1")),
        )

    def validate(self) -> None:
        """Raise configuration error on out-of-range values."""

        if self.poll_interval_ms <= 0:
            raise ValueError("STEPWISE_POLL_INTERVAL_MS must be > 0.")
        if self.unit_timeout_seconds < 0:
            raise ValueError("STEPWISE_UNIT_TIMEOUT_SECONDS must be >= 0.")
        if self.exit_code_on_failure == 0:
            raise ValueError("STEPWISE_FAILURE_EXIT_CODE must be non-zero.")


def _env_optional_bool(name: str) -> bool | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    if normalized == "auto":
        return None
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
