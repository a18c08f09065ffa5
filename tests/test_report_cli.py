from __future__ import annotations

import json
from pathlib import Path

import pytest

import eve_value
from eve_value import report
from eve_value.engine.aggregation import AggregationPolicy
from eve_value.errors import NotFoundError
from eve_value.ingestion.models import RateCandidate


class _FakeSource:
    name = "fake"

    def __init__(self, values=(), error=None) -> None:
        self.values = values
        self.error = error

    def fetch_candidates(self) -> list[RateCandidate]:
        if self.error is not None:
            raise self.error
        return [RateCandidate(value=value, source=self.name) for value in self.values]


@pytest.fixture()
def packs(tmp_path: Path) -> str:
    path = tmp_path / "packs.json"
    path.write_text(
        json.dumps([{"name": "500 PLEX", "price_usd": 10.0, "plex_amount": 500}]), encoding="utf-8"
    )
    return str(path)


def _use_source(monkeypatch: pytest.MonkeyPatch, source: _FakeSource) -> None:
    monkeypatch.setattr(eve_value, "build_fallback_source", lambda feeds, client: source)


def test_parse_args_defaults() -> None:
    args = report.parse_args([])

    assert args.config_path is None
    assert args.manual_rate is None
    assert args.skip_plans is False


def test_build_settings_applies_overrides(tmp_path: Path) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("aggregation_policy: mean\nblock_size: 1000000\n", encoding="utf-8")

    settings = report.build_settings(
        report.parse_args(["--config", str(config), "--policy", "min", "--offers", "shop.json", "--no-plans"])
    )

    assert settings.aggregation_policy is AggregationPolicy.MIN
    assert settings.block_size == 1_000_000
    assert settings.offers_source == "shop.json"
    assert settings.plans_source == ""


def test_main_with_manual_rate(packs: str, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    _use_source(monkeypatch, _FakeSource(error=NotFoundError("must not be called")))

    exit_code = report.main(["--offers", packs, "--no-plans", "--manual-rate", "5000"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "PLEX price: 5,000 ISK (manual" in output
    assert "[Best] $0.02" in output


def test_main_rejects_invalid_manual_rate(packs: str, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    _use_source(monkeypatch, _FakeSource())

    exit_code = report.main(["--offers", packs, "--no-plans", "--manual-rate", "-1"])

    assert exit_code == 2
    assert "invalid manual rate" in capsys.readouterr().err


def test_main_reports_missing_offers(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    _use_source(monkeypatch, _FakeSource([5000.0]))

    exit_code = report.main(["--offers", str(tmp_path / "missing.json"), "--no-plans"])

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("Error: offers (FetchError)")


def test_main_refreshes_from_rate_feed(packs: str, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    _use_source(monkeypatch, _FakeSource([4800.0, 5200.0]))

    exit_code = report.main(["--offers", packs, "--no-plans", "--policy", "mean"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "PLEX price: 5,000 ISK (mean of 2 from fake" in output
    assert "No Omega data." in output


def test_main_reports_rate_failure(packs: str, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    _use_source(monkeypatch, _FakeSource(error=NotFoundError("type_id=44992 not found in fake")))

    exit_code = report.main(["--offers", packs, "--no-plans"])

    assert exit_code == 1
    assert "rate (NotFoundError): type_id=44992 not found in fake" in capsys.readouterr().out


def test_main_reports_missing_config(tmp_path: Path, capsys) -> None:
    exit_code = report.main(["--config", str(tmp_path / "absent.yaml")])

    assert exit_code == 1
    assert capsys.readouterr().err.startswith("Error: config (FileNotFoundError)")


def test_main_reports_invalid_config(tmp_path: Path, capsys) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("aggregation_policy: mode\n", encoding="utf-8")

    exit_code = report.main(["--config", str(config)])

    assert exit_code == 1
    assert capsys.readouterr().err.startswith("Error: config (InvalidInputError)")
