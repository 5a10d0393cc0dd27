"""Logging setup, structured run events and optional StatsD counters for the CLIs."""

from __future__ import annotations

import json
import logging
import socket
import threading
from datetime import datetime, timezone
from typing import Any, Mapping

from chainmeta.settings import Settings, get_settings

_LOGGER = logging.getLogger("chainmeta.observability")
_STATSD_LOCK = threading.Lock()
_STATSD: "StatsdCounter | None" = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(settings: Settings | None = None, *, level: str | None = None) -> None:
    """Configure root logging for a CLI run."""

    resolved = settings or get_settings()
    level_name = (level or resolved.log_level or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)


class StatsdCounter:
    """Fire-and-forget StatsD counters over UDP (DogStatsD tag syntax)."""

    def __init__(self, host: str, port: int, prefix: str = "") -> None:
        self.address = (host, port)
        self.prefix = prefix
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def increment(self, metric: str, *, value: float, tags: Mapping[str, str] | None) -> None:
        name = f"{self.prefix}.{metric}" if self.prefix else metric
        line = f"{name}:{value:g}|c"
        if tags:
            line += "|#" + ",".join(f"{key}:{tags[key]}" for key in sorted(tags))
        try:
            self._socket.sendto(line.encode("utf-8"), self.address)
        except OSError:  # pragma: no cover - metrics never fail a run
            _LOGGER.debug("StatsD send failed for %s", metric, exc_info=True)


class Observability:
    """Emit run events as log lines and count outcomes.

    Args:
        settings: Loaded settings; ``observability.structured_logging`` switches
            events to one JSON object per line.
        component: Name of the tool emitting events.
        metrics_backend: Counter sink; counters are dropped when None.
        logger: Logger receiving the events.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        component: str | None = None,
        metrics_backend: StatsdCounter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.component = component or "core"
        self._structured = bool(settings.observability.structured_logging)
        self._metrics = metrics_backend
        self._logger = logger or _LOGGER

    def emit_event(self, event: str, **fields: Any) -> None:
        payload = {
            "event": event,
            "component": self.component,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **fields,
        }
        if self._structured:
            self._logger.info(json.dumps(payload, default=str))
        else:
            self._logger.info("%s | %s", event, payload)

    def increment(self, metric: str, *, value: float = 1.0, tags: Mapping[str, Any] | None = None) -> None:
        if self._metrics is None:
            return
        cleaned = {str(key): str(val) for key, val in (tags or {}).items() if val is not None}
        self._metrics.increment(metric, value=value, tags=cleaned or None)


def get_observability(*, component: str | None = None, settings: Settings | None = None) -> Observability:
    """Return an :class:`Observability` sharing one StatsD socket per process."""

    resolved = settings or get_settings()
    return Observability(
        settings=resolved,
        component=component,
        metrics_backend=_shared_statsd(resolved),
        logger=_LOGGER,
    )


def reset_observability_cache() -> None:
    """Drop the shared StatsD counter (used in tests)."""

    global _STATSD
    with _STATSD_LOCK:
        _STATSD = None


def _shared_statsd(settings: Settings) -> StatsdCounter | None:
    global _STATSD
    with _STATSD_LOCK:
        if _STATSD is None and settings.observability.statsd_host:
            _STATSD = StatsdCounter(
                settings.observability.statsd_host,
                settings.observability.statsd_port,
                settings.observability.statsd_prefix,
            )
        return _STATSD


__all__ = ["Observability", "StatsdCounter", "configure_logging", "get_observability", "reset_observability_cache"]
