from __future__ import annotations

import pytest

from enrollment_engine.config import get_settings


def test_get_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ENROLLMENT_DATA_SOURCE", "ENROLLMENT_TOP_N", "ENROLLMENT_BIN_COUNT", "ENROLLMENT_CUTOFF"):
        monkeypatch.delenv(name, raising=False)
    s = get_settings()
    assert s.data_source == "data/cleaned.csv"
    assert (s.top_n, s.bin_count, s.cutoff) == (10, 20, 0.0)


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENROLLMENT_BIN_COUNT", "12")
    monkeypatch.setenv("ENROLLMENT_CUTOFF", "250.5")
    monkeypatch.setenv("ENROLLMENT_LOG_LEVEL", "debug")
    s = get_settings()
    assert s.bin_count == 12
    assert s.cutoff == 250.5
    assert s.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("ENROLLMENT_TOP_N", "ten"),
        ("ENROLLMENT_BIN_COUNT", "0"),
        ("ENROLLMENT_CUTOFF", "nan"),
        ("ENROLLMENT_LOG_LEVEL", "LOUD"),
    ],
)
def test_get_settings_rejects_bad_values(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(RuntimeError, match=name):
        get_settings()
