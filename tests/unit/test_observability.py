"""Tests for structured event logging and metrics forwarding."""

from __future__ import annotations

import json
import logging
from unittest.mock import Mock

from chainmeta.observability import Observability, StatsdCounter, get_observability, reset_observability_cache
from chainmeta.settings.config import reload_settings


def test_structured_events_are_json(monkeypatch, caplog):
    monkeypatch.setenv("CHAINMETA_OBSERVABILITY__STRUCTURED_LOGGING", "true")
    settings = reload_settings(env="test")
    logger = logging.getLogger("chainmeta.test.observability")
    obs = Observability(settings=settings, component="validate", logger=logger)

    with caplog.at_level(logging.INFO, logger="chainmeta.test.observability"):
        obs.emit_event("validation.completed", files=3, errors=0)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "validation.completed"
    assert payload["component"] == "validate"
    assert payload["files"] == 3


def test_increment_forwards_tags_to_backend():
    backend = Mock()
    obs = Observability(settings=reload_settings(env="test"), metrics_backend=backend)

    obs.increment("vault_image.result", tags={"outcome": "success", "skip": None})

    backend.increment.assert_called_once_with("vault_image.result", value=1.0, tags={"outcome": "success"})


def test_increment_without_backend_is_noop():
    Observability(settings=reload_settings(env="test")).increment("anything")


def test_get_observability_shares_statsd_backend(monkeypatch):
    reset_observability_cache()
    monkeypatch.setenv("CHAINMETA_OBSERVABILITY__STATSD_HOST", "127.0.0.1")
    settings = reload_settings(env="test")
    try:
        first = get_observability(component="a", settings=settings)
        second = get_observability(component="b", settings=settings)
        assert first._metrics is not None
        assert first._metrics is second._metrics
    finally:
        reset_observability_cache()

    monkeypatch.delenv("CHAINMETA_OBSERVABILITY__STATSD_HOST")
    assert get_observability(settings=reload_settings(env="test"))._metrics is None


def test_statsd_counter_line_format():
    counter = StatsdCounter("127.0.0.1", 8125, "chainmeta")
    counter._socket = Mock()

    counter.increment("vault_image.result", value=1.0, tags={"outcome": "success", "chain": "mainnet"})

    counter._socket.sendto.assert_called_once_with(
        b"chainmeta.vault_image.result:1|c|#chain:mainnet,outcome:success", ("127.0.0.1", 8125)
    )
