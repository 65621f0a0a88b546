from __future__ import annotations

import json
import logging

from yieldfarm.runtime import metrics
from yieldfarm.runtime.event_log import log_event


def test_counters_gauges_and_prometheus_text():
    metrics.inc_counter("settlements_total")
    metrics.inc_counter("settlements_total", 2)
    metrics.inc_counter("")
    metrics.set_gauge("pools", 3)

    snap = metrics.snapshot()
    assert snap["counters"] == {"settlements_total": 3}
    assert snap["gauges"] == {"pools": 3}

    text = metrics.format_prometheus()
    assert "yieldfarm_settlements_total 3\n" in text
    assert "yieldfarm_pools 3\n" in text
    assert text.startswith("yieldfarm_uptime_ms ")


def test_metrics_enabled_flag(monkeypatch):
    monkeypatch.delenv("YIELDFARM_METRICS_ENABLED", raising=False)
    assert metrics.metrics_enabled() is False
    monkeypatch.setenv("YIELDFARM_METRICS_ENABLED", "yes")
    assert metrics.metrics_enabled() is True
    monkeypatch.setenv("YIELDFARM_METRICS_ENABLED", "0")
    assert metrics.metrics_enabled() is False


def test_farm_operations_emit_counters_and_events(make_farm, caplog):
    h = make_farm(50, 300, 10_000, 10_000)
    farm = h.farm
    with caplog.at_level(logging.INFO, logger="yieldfarm"):
        farm.add_pool("alice", 100, h.lp)
        h.approve_all(h.lp, ["bob"])
        h.at(310).deposit("bob", 0, 10)
        h.at(320).withdraw("bob", 0, 10)

    events = [json.loads(r.getMessage())["event"] for r in caplog.records if r.name.startswith("yieldfarm")]
    assert events == ["pool_added", "deposit", "pool_settled", "withdraw"]

    counters = metrics.snapshot()["counters"]
    assert counters["op_add_pool_total"] == 1
    assert counters["op_deposit_total"] == 1
    assert counters["op_withdraw_total"] == 1
    assert counters["settlements_total"] == 1
    assert counters["reward_minted_total"] == 11_000
    assert metrics.snapshot()["gauges"]["pools"] == 1


def test_log_event_falls_back_for_unserializable_fields(caplog):
    logger = logging.getLogger("yieldfarm.test")
    with caplog.at_level(logging.INFO, logger="yieldfarm.test"):
        log_event(logger, "odd", value=object())
    msg = caplog.records[-1].getMessage()
    assert msg.startswith("event=odd value=")
