from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class StoreConfig:
    search_debounce_s: float = 0.4
    seed_demo_tasks: bool = True
    refresh_delay_s: float = 1.0
    sync_delay_s: float = 1.5
    export_indent: int = 2


def _read_ms(e: dict[str, Any], key: str, default_ms: int) -> float:
    raw = (e.get(key) or "").strip()
    try:
        value = int(raw) if raw else default_ms
    except Exception:
        value = default_ms
    return max(0, value) / 1000.0


def _read_bool(e: dict[str, Any], key: str, default: bool) -> bool:
    raw = (e.get(key) or "").strip().lower()
    if not raw:
        return default
    return raw not in {"0", "false", "no", "off"}


def _read_indent(e: dict[str, Any]) -> int:
    raw = (e.get("TASKDECK_EXPORT_INDENT") or "").strip()
    try:
        value = int(raw) if raw else 2
    except Exception:
        value = 2
    return min(8, max(0, value))


def load_config(env: dict[str, str] | None = None) -> StoreConfig:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    return StoreConfig(
        search_debounce_s=_read_ms(e, "TASKDECK_SEARCH_DEBOUNCE_MS", 400),
        seed_demo_tasks=_read_bool(e, "TASKDECK_SEED_DEMO_TASKS", True),
        refresh_delay_s=_read_ms(e, "TASKDECK_REFRESH_DELAY_MS", 1000),
        sync_delay_s=_read_ms(e, "TASKDECK_SYNC_DELAY_MS", 1500),
        export_indent=_read_indent(e),
    )


__all__ = ["StoreConfig", "load_config"]
