from __future__ import annotations

import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class RelaySettings:
    ttl_ms: int
    sweep_interval_s: float


@dataclass(frozen=True, slots=True)
class HostSettings:
    relay_url: str
    poll_interval_s: float
    polling_enabled: bool
    alerts_webhook_url: str | None
    # Must match the relay so applied ids outlive any possible re-delivery.
    ttl_ms: int = 60_000
    # How often the host logs its debug snapshot; 0 disables the periodic report.
    status_interval_s: float = 60.0


def relay_settings_from_env() -> RelaySettings:
    return RelaySettings(
        ttl_ms=int(os.environ.get("WORDGUESS_TTL_MS", "60000")),
        # 0 disables the background sweep (Redis key expiry still applies).
        sweep_interval_s=float(os.environ.get("WORDGUESS_SWEEP_INTERVAL_S", "5")),
    )


def host_settings_from_env() -> HostSettings:
    return HostSettings(
        relay_url=os.environ.get("WORDGUESS_RELAY_URL", "http://localhost:8000").rstrip("/"),
        poll_interval_s=float(os.environ.get("WORDGUESS_POLL_INTERVAL_S", "1.0")),
        polling_enabled=_env_flag("WORDGUESS_POLLING_ENABLED", True),
        alerts_webhook_url=os.environ.get("WORDGUESS_ALERTS_WEBHOOK_URL") or None,
        ttl_ms=int(os.environ.get("WORDGUESS_TTL_MS", "60000")),
        status_interval_s=float(os.environ.get("WORDGUESS_STATUS_INTERVAL_S", "60")),
    )


def log_level_from_env() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()
