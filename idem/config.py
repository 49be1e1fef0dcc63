"""
Idem Configuration
==================
Settings shared by the command-line front end and embedding hosts.

Values come from dataclass defaults, then environment variables
(`IDEM_TRACE`, `IDEM_MAX_DEPTH`), then explicit overrides (CLI flags).
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace


SOURCE_EXTENSION = ".id"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class IdemConfig:
    """Configuration for reading, validating and running Idem programs."""

    extension: str = SOURCE_EXTENSION   # Required source file extension
    validate_before_run: bool = True    # Refuse to run programs with reports
    trace: bool = False                 # Log every function call
    max_depth: int | None = None        # Maximum nested Idem calls (None: host stack only)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> IdemConfig:
        """Build a config from environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        trace = env.get("IDEM_TRACE")
        if trace is not None:
            config = replace(config, trace=trace.strip().lower() in _TRUTHY)

        depth = env.get("IDEM_MAX_DEPTH")
        if depth:
            try:
                value = int(depth)
            except ValueError:
                raise ValueError(f"IDEM_MAX_DEPTH must be an integer, got {depth!r}") from None
            if value < 1:
                raise ValueError(f"IDEM_MAX_DEPTH must be positive, got {value}")
            config = replace(config, max_depth=value)

        return config

    def with_overrides(self, **overrides) -> IdemConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)
