# -*- coding: utf-8 -*-
"""
Unit tests for structured logging and metrics collection.
"""

import json
import logging

from utils.observability import (
    JSONFormatter,
    MetricsCollector,
    StructuredLogger,
    get_structured_logger,
    metrics,
    timed,
)


class TestMetricsCollector:
    """Tests for counters, histograms and gauges."""

    def test_counters(self):
        collector = MetricsCollector()
        collector.increment("claims.total")
        collector.increment("claims.total", value=2, tags={"source": "api"})

        assert collector.get_counter("claims.total") == 3
        assert collector.get_counter("missing") == 0

    def test_histogram_stats(self):
        collector = MetricsCollector()
        for value in (1, 2, 3, 4):
            collector.histogram("claims.payout", value)
        collector.gauge("pool.total_power", 1_000)

        stats = collector.get_stats()
        payout = stats["histograms"]["claims.payout"]
        assert payout["count"] == 4
        assert payout["sum"] == 10
        assert payout["min"] == 1
        assert payout["max"] == 4
        assert payout["mean"] == 2.5
        assert stats["gauges"] == {"pool.total_power": 1_000}

    def test_timer_records_duration(self):
        collector = MetricsCollector()
        with collector.timer("packs.open_time"):
            pass
        assert collector.get_stats()["histograms"]["packs.open_time.duration_ms"]["count"] == 1

    def test_reset(self):
        collector = MetricsCollector()
        collector.increment("x")
        collector.reset()
        assert collector.get_stats()["counters"] == {}


class TestTimedDecorator:
    """Tests for the timing decorator on the global collector."""

    def test_named_metric(self):
        @timed("unit.operation")
        def operation(value):
            return value * 2

        assert operation(21) == 42
        assert metrics.get_stats()["histograms"]["unit.operation.duration_ms"]["count"] == 1

    def test_default_metric_name(self):
        @timed()
        def helper():
            return None

        helper()
        assert f"{__name__}.helper.duration_ms" in metrics.get_stats()["histograms"]


class TestStructuredLogging:
    """Tests for JSON formatting and context injection."""

    def test_json_formatter_includes_extra_fields(self):
        record = logging.LogRecord("sfe.test", logging.INFO, __file__, 10, "reward_claimed", None, None)
        record.payout = 850_000
        entry = json.loads(JSONFormatter(service_name="EconomyService").format(record))

        assert entry["message"] == "reward_claimed"
        assert entry["service"] == "EconomyService"
        assert entry["payout"] == 850_000
        assert entry["level"] == "INFO"

    def test_adapter_adds_context(self):
        adapter = StructuredLogger(logging.getLogger("sfe.test.adapter"), {"service": "EconomyService"})
        _, kwargs = adapter.process("pack_opened", {"extra": {"pack_id": 3}})
        assert kwargs["extra"] == {"pack_id": 3, "service": "EconomyService"}

    def test_get_structured_logger_configures_once(self):
        first = get_structured_logger("sfe.test.structured", service_name="Svc", context={"region": "eu"})
        second = get_structured_logger("sfe.test.structured", service_name="Svc")

        assert first.extra == {"service": "Svc", "region": "eu"}
        assert len(second.logger.handlers) == 1
