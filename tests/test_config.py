from __future__ import annotations

import pytest

from taskdeck.config import StoreConfig, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "TASKDECK_SEARCH_DEBOUNCE_MS",
        "TASKDECK_SEED_DEMO_TASKS",
        "TASKDECK_REFRESH_DELAY_MS",
        "TASKDECK_SYNC_DELAY_MS",
        "TASKDECK_EXPORT_INDENT",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    cfg = load_config()
    assert cfg == StoreConfig()
    assert cfg.search_debounce_s == pytest.approx(0.4)
    assert cfg.seed_demo_tasks is True


def test_env_overrides() -> None:
    cfg = load_config(
        {
            "TASKDECK_SEARCH_DEBOUNCE_MS": "250",
            "TASKDECK_SEED_DEMO_TASKS": "false",
            "TASKDECK_REFRESH_DELAY_MS": "0",
            "TASKDECK_SYNC_DELAY_MS": "3000",
            "TASKDECK_EXPORT_INDENT": "4",
        }
    )
    assert cfg.search_debounce_s == pytest.approx(0.25)
    assert cfg.seed_demo_tasks is False
    assert cfg.refresh_delay_s == 0.0
    assert cfg.sync_delay_s == pytest.approx(3.0)
    assert cfg.export_indent == 4


def test_invalid_values_fall_back_or_clamp(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKDECK_SEARCH_DEBOUNCE_MS", "soon")
    monkeypatch.setenv("TASKDECK_SYNC_DELAY_MS", "-5")
    monkeypatch.setenv("TASKDECK_EXPORT_INDENT", "99")

    cfg = load_config()

    assert cfg.search_debounce_s == pytest.approx(0.4)
    assert cfg.sync_delay_s == 0.0
    assert cfg.export_indent == 8
