"""
Tests for the daily sync action's argument parsing and exit codes.

**Purpose**: Verify that main() wires settings, CLI overrides and the pipeline
together, and maps each failure mode to the documented exit code.

**Testing philosophy**: Replace get_settings and WakapiClient inside the
action module so no .env or network access is needed; the pipeline itself
runs for real against tmp_path.
"""

import pytest

from actions import sync_wakapi_daily_summary as action
from wakapi_sync.config.settings import OutputSettings, Settings, WakapiSettings
from wakapi_sync.data.schemas import DAILY_TOP_PROJECTS, DAILY_TOTAL
from wakapi_sync.venues.wakapi_client import WakapiAuthenticationError, WakapiServerError

STATUSBAR = {
    "data": {
        "grand_total": {"total_seconds": 5400},
        "projects": [
            {"name": "alpha", "total_seconds": 3600, "percent": 66.7},
            {"name": "beta", "total_seconds": 1800, "percent": 33.3},
        ],
        "languages": [{"name": "Python", "total_seconds": 5400, "percent": 100}],
    },
}


class FakeClient:
    """Stands in for WakapiClient, including the context manager protocol."""

    statusbar = STATUSBAR
    error = None

    def __init__(self, settings):
        self.settings = settings

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def get_statusbar_today(self):
        if self.error is not None:
            raise self.error
        return self.statusbar

    def get_summaries(self, start_date, end_date):
        return {"data": []}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        wakapi=WakapiSettings(base_url="https://wakapi.test", api_key="k"),
        output=OutputSettings(out_dir=tmp_path / "default"),
    )


@pytest.fixture
def patched(monkeypatch, settings):
    monkeypatch.setattr(action, "get_settings", lambda require_wakapi=False: settings)
    monkeypatch.setattr(action, "WakapiClient", FakeClient)
    return settings


def run_main(argv):
    with pytest.raises(SystemExit) as exc_info:
        action.main(argv)
    return exc_info.value.code


def test_parse_args_defaults_to_none():
    args = action.parse_args([])

    assert args.out_dir is None
    assert args.top_n_projects is None
    assert args.top_n_languages is None
    assert args.verbose is False


def test_parse_args_overrides():
    args = action.parse_args(
        ["--out-dir", "out", "--top-n-projects", "3", "--top-n-languages", "4", "--verbose"]
    )

    assert args.out_dir == "out"
    assert args.top_n_projects == 3
    assert args.top_n_languages == 4
    assert args.verbose is True


def test_main_success_writes_to_settings_out_dir(patched, capsys):
    assert run_main([]) == 0

    out_dir = patched.output.out_dir
    assert DAILY_TOTAL.path_in(out_dir).exists()
    assert "✓ daily-total.csv: 1 row(s)" in capsys.readouterr().out


def test_main_cli_overrides_settings(patched, tmp_path):
    out_dir = tmp_path / "override"

    assert run_main(["--out-dir", str(out_dir), "--top-n-projects", "1"]) == 0

    assert not patched.output.out_dir.exists()
    projects = DAILY_TOP_PROJECTS.path_in(out_dir).read_text(encoding="utf-8").splitlines()
    assert len(projects) == 2  # header + one ranked row
    assert ",alpha," in projects[1]


def test_main_invalid_override_exits_2(patched):
    assert run_main(["--top-n-languages", "0"]) == 2


def test_main_missing_settings_exits_2(monkeypatch):
    def fail(require_wakapi=False):
        raise ValueError("Wakapi settings are required")

    monkeypatch.setattr(action, "get_settings", fail)

    assert run_main([]) == 2


@pytest.mark.parametrize(
    "error",
    [WakapiAuthenticationError("bad key"), WakapiServerError("down")],
)
def test_main_fetch_failure_exits_2(patched, monkeypatch, error):
    monkeypatch.setattr(FakeClient, "error", error)

    assert run_main([]) == 2
    assert not patched.output.out_dir.exists()


def test_main_partial_failure_exits_1(patched, capsys):
    DAILY_TOP_PROJECTS.path_in(patched.output.out_dir).mkdir(parents=True)

    assert run_main([]) == 1
    assert "✗ daily-top-projects.csv" in capsys.readouterr().out
