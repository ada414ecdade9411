from __future__ import annotations

import runpy
from pathlib import Path

import pytest

import hackatime_bootstrap.__main__ as bootstrap_main
import hackatime_bootstrap.cli as cli
from hackatime_bootstrap.errors import AssetNotFoundError, FetchError
from hackatime_bootstrap.resolver import Asset, PlatformTarget
from hackatime_bootstrap.service import RunResult


@pytest.fixture(autouse=True)
def _no_log_dir(monkeypatch) -> None:
    monkeypatch.delenv("HACKATIME_BOOTSTRAP_LOG_DIR", raising=False)


def _result(exit_code: int) -> RunResult:
    return RunResult(
        target=PlatformTarget("linux", "x86_64"),
        asset=Asset(name="hackatime_setup-linux-x86_64.tar.gz", url="U"),
        workdir=Path("/tmp/hackatime-setup-x"),
        executable=Path("/tmp/hackatime-setup-x/hackatime_setup"),
        exit_code=exit_code,
    )


def test_main_forwards_arguments_and_propagates_exit_code(monkeypatch) -> None:
    calls: list[tuple[str, str | None]] = []

    def fake_run(key, api_url=None, config=None, progress=None):
        calls.append((key, api_url))
        return _result(7)

    monkeypatch.setattr(cli, "run_bootstrap", fake_run)

    assert cli.main(["abc", "https://api.example"]) == 7
    assert calls == [("abc", "https://api.example")]


def test_main_maps_signal_death_to_128_plus_signal(monkeypatch) -> None:
    monkeypatch.setattr(cli, "run_bootstrap", lambda *_args, **_kwargs: _result(-9))

    assert cli.main(["abc"]) == 137


def test_main_asset_not_found_exits_one(monkeypatch) -> None:
    def fake_run(*_args, **_kwargs):
        raise AssetNotFoundError("hackatime_setup-linux-x86_64.tar.gz", ["other.zip"])

    monkeypatch.setattr(cli, "run_bootstrap", fake_run)

    assert cli.main(["abc"]) == 1


def test_main_other_failures_exit_one(monkeypatch) -> None:
    def fake_run(*_args, **_kwargs):
        raise FetchError("Release lookup failed: HTTP 503")

    monkeypatch.setattr(cli, "run_bootstrap", fake_run)

    assert cli.main(["abc"]) == 1


def test_main_interrupt_exits_130(monkeypatch) -> None:
    def fake_run(*_args, **_kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "run_bootstrap", fake_run)

    assert cli.main(["abc"]) == 130


def test_module_main_passes_through_args(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(bootstrap_main, "_cli_main", lambda argv=None: calls.append(list(argv or [])) or 0)

    assert bootstrap_main.main(["abc", "https://api.example"]) == 0
    assert calls == [["abc", "https://api.example"]]


def test_main_module_runpath_without_package_context() -> None:
    main_path = (
        Path(__file__).resolve().parents[1]
        / "installers"
        / "bootstrap"
        / "hackatime_bootstrap"
        / "__main__.py"
    )
    result = runpy.run_path(str(main_path))
    assert "main" in result
