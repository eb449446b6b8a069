"""Transport configuration: explicit values or environment (SIMPLYCALL_*)."""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from simplycall.errors import ConfigurationError

ENV_PREFIX = "SIMPLYCALL_"


@dataclass(frozen=True, slots=True)
class HttpTransportConfig:
    """Where the sending HTTP transport posts calls. timeout in seconds; None waits forever."""

    url: str
    timeout: float | None = None

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
        *,
        url: str | None = None,
        timeout: float | None = None,
    ) -> HttpTransportConfig:
        """
        Read {prefix}URL and {prefix}TIMEOUT. Keyword values are fallbacks for unset variables.
        environ defaults to os.environ.
        """
        env = os.environ if environ is None else environ
        raw_url = env.get(f"{prefix}URL") or url
        if not raw_url:
            raise ConfigurationError(f"{prefix}URL is not set")
        raw_timeout = env.get(f"{prefix}TIMEOUT")
        if raw_timeout in (None, ""):
            return cls(url=raw_url.strip(), timeout=timeout)
        try:
            return cls(url=raw_url.strip(), timeout=float(raw_timeout))
        except ValueError:
            raise ConfigurationError(f"{prefix}TIMEOUT must be a number, got {raw_timeout!r}") from None
