from __future__ import annotations

from decimal import Decimal

from src.tracker.expenses.config import TrackerConfig, load_tracker_config
from src.utils.money import format_money, to_decimal


def test_format_money():
    assert format_money(Decimal("1234.5")) == "$1,234.50"
    assert format_money(Decimal("-3.005")) == "-$3.01"
    assert format_money("10.99", symbol="EUR ") == "EUR 10.99"
    assert format_money(None) == "-"
    assert format_money("n/a") == "n/a"


def test_to_decimal():
    assert to_decimal("1,000.10") == Decimal("1000.10")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("x") is None


def test_config_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("EXPENSE_TRACKER_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    cfg, path = load_tracker_config()
    assert path is None
    assert cfg.page_size == 8
    assert cfg.max_page_size == 100
    assert "Groceries" in cfg.default_expense_types


def test_config_from_yaml(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("EXPENSE_TRACKER_CONFIG", raising=False)
    (tmp_path / "expense_tracker.yaml").write_text(
        "tracker:\n  page_size: 5\n  log_level: debug\n  default_expense_types: [Food, Rent]\n"
    )
    cfg, path = load_tracker_config()
    assert path == "expense_tracker.yaml"
    assert cfg.page_size == 5
    assert cfg.log_level == "DEBUG"
    assert cfg.default_expense_types == ["Food", "Rent"]


def test_config_path_from_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    custom = tmp_path / "custom.yaml"
    custom.write_text("page_size: 12\ncurrency_symbol: 'EUR'\n")
    monkeypatch.setenv("EXPENSE_TRACKER_CONFIG", str(custom))
    cfg, path = load_tracker_config()
    assert path == str(custom)
    assert cfg == TrackerConfig(page_size=12, currency_symbol="EUR")
