"""Configuration helpers for the pricing workflow."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("config/pricing.yaml")
LOGGER = logging.getLogger(__name__)

PRICE_FALLBACKS = ("base", "previous")
PENDING_POLICIES = ("revert", "keep", "error")


@dataclass
class RetryPolicy:
    """Retry/backoff policy for the save callback."""

    timeout_seconds: Optional[float] = None
    retries: int = 0
    backoff_factor: float = 0.0


@dataclass
class WorkflowConfig:
    invalid_price_fallback: str = "base"
    pending_at_finalize: str = "revert"
    currency_symbol: str = "$"
    save: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        if self.invalid_price_fallback not in PRICE_FALLBACKS:
            raise ValueError(
                f"invalid_price_fallback must be one of {PRICE_FALLBACKS}, got {self.invalid_price_fallback!r}"
            )
        if self.pending_at_finalize not in PENDING_POLICIES:
            raise ValueError(
                f"pending_at_finalize must be one of {PENDING_POLICIES}, got {self.pending_at_finalize!r}"
            )

    @classmethod
    def load(cls, path: Path | None = None, env: Mapping[str, str] | None = None) -> "WorkflowConfig":
        """Load configuration from a YAML/JSON file.

        Without an explicit path the default location is used when it exists,
        otherwise the built-in defaults apply.
        """
        if path is None:
            if not DEFAULT_CONFIG_PATH.exists():
                return cls.from_dict({}, env=env)
            path = DEFAULT_CONFIG_PATH
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with path.open("r", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                raw = yaml.safe_load(f)
            else:
                raw = json.load(f)

        LOGGER.debug("Loaded pricing workflow config from %s", path)
        return cls.from_dict(raw or {}, env=env)

    @classmethod
    def from_dict(cls, raw: dict, env: Mapping[str, str] | None = None) -> "WorkflowConfig":
        environ = os.environ if env is None else env
        save = dict(raw.get("save") or {})

        timeout = _env_or(environ, "PRICING_SAVE_TIMEOUT", save.get("timeout_seconds"))
        retry_policy = RetryPolicy(
            timeout_seconds=float(timeout) if timeout not in (None, "") else None,
            retries=int(_env_or(environ, "PRICING_SAVE_RETRIES", save.get("retries", 0))),
            backoff_factor=float(_env_or(environ, "PRICING_SAVE_BACKOFF", save.get("backoff_factor", 0.0))),
        )

        return cls(
            invalid_price_fallback=str(
                _env_or(environ, "PRICING_INVALID_PRICE_FALLBACK", raw.get("invalid_price_fallback", "base"))
            ).lower(),
            pending_at_finalize=str(
                _env_or(environ, "PRICING_PENDING_AT_FINALIZE", raw.get("pending_at_finalize", "revert"))
            ).lower(),
            currency_symbol=str(_env_or(environ, "PRICING_CURRENCY_SYMBOL", raw.get("currency_symbol", "$"))),
            save=retry_policy,
        )


def _env_or(environ: Mapping[str, str], key: str, default):
    value = environ.get(key)
    if value is None or not str(value).strip():
        return default
    return value.strip()


__all__ = [
    "WorkflowConfig",
    "RetryPolicy",
    "DEFAULT_CONFIG_PATH",
    "PRICE_FALLBACKS",
    "PENDING_POLICIES",
]
