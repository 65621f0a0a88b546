# src/yieldfarm/runtime/__init__.py
"""Process-level plumbing: config loading, JSONL logging, metrics, service wiring."""

from __future__ import annotations

__all__ = ["config", "event_log", "metrics", "service"]
