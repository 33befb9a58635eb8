"""Tests for the command-line entry point and profile handling."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from run_bdd import PROFILES, build_behave_args, main, parse_userdata


def userdata_of(args: list[str]) -> dict:
    pairs = [args[i + 1] for i, a in enumerate(args) if a == "-D"]
    return dict(p.split("=", 1) for p in pairs)


class TestBuildArgs:
    def test_default_profile(self) -> None:
        args = build_behave_args()
        assert args[:4] == ["-f", "progress", "-o", "-"]
        assert args[4:8] == ["-f", "json", "-o", str(Path("reports") / "behave.json")]
        assert args[-1] == "features"
        assert userdata_of(args) == {"report_dir": "reports"}

    def test_ci_profile_json_only_and_headless(self) -> None:
        args = build_behave_args("ci", report_dir="out")
        assert "progress" not in args
        assert userdata_of(args)["headless"] == "true"

    def test_browserstack_profile(self) -> None:
        data = userdata_of(build_behave_args("bs-chrome"))
        assert data["target"] == "browserstack"
        assert (data["bs_os"], data["bs_os_version"]) == ("Windows", "11")

    def test_extra_userdata_overrides_profile(self) -> None:
        data = userdata_of(build_behave_args("edge", userdata={"channel": "chrome"}))
        assert data["channel"] == "chrome"
        assert data["browser"] == "chromium"

    def test_tags_and_paths(self) -> None:
        args = build_behave_args(tags=["@smoke"], paths=["features/home.feature"], verbose=True)
        assert ["--tags", "@smoke"] == args[args.index("--tags") : args.index("--tags") + 2]
        assert args[-1] == "features/home.feature"
        assert userdata_of(args)["verbose"] == "true"

    def test_unknown_profile(self) -> None:
        with pytest.raises(SystemExit):
            build_behave_args("safari")

    def test_profiles_cover_local_and_remote(self) -> None:
        assert {"default", "ci", "chrome", "edge", "firefox", "bs-chrome"} <= set(PROFILES)


def test_parse_userdata() -> None:
    assert parse_userdata(["browser=firefox", "bs_os = OS X"]) == {"browser": "firefox", "bs_os": "OS X"}
    with pytest.raises(SystemExit):
        parse_userdata(["novalue"])


class TestMain:
    def test_config_error_exits_before_behave(self, tmp_path: Path, config_file: Path, monkeypatch, capsys) -> None:
        monkeypatch.setenv("ENV", "tst")
        monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))
        with patch("behave.__main__.main") as behave_main:
            code = main(["--env", "uat", "--report-dir", str(tmp_path / "r")])
        assert code == 2
        behave_main.assert_not_called()
        assert "Config for environment 'uat' not found" in capsys.readouterr().err

    def test_runs_behave_with_profile(self, tmp_path: Path, config_file: Path, monkeypatch) -> None:
        monkeypatch.setenv("ENV", "tst")
        monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))
        report_dir = tmp_path / "r"
        with patch("behave.__main__.main", return_value=0) as behave_main:
            code = main(["--env", "tst", "--profile", "firefox", "--report-dir", str(report_dir), "-D", "monitor=true"])
        assert code == 0
        args = behave_main.call_args.args[0]
        assert userdata_of(args)["browser"] == "firefox"
        assert userdata_of(args)["monitor"] == "true"
        assert report_dir.is_dir()

    def test_missing_remote_credentials_exit_before_behave(self, tmp_path: Path, config_file: Path, monkeypatch, capsys) -> None:
        monkeypatch.setenv("ENV", "tst")
        monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))
        monkeypatch.delenv("BROWSERSTACK_USERNAME", raising=False)
        monkeypatch.delenv("BROWSERSTACK_ACCESS_KEY", raising=False)
        with patch("behave.__main__.main") as behave_main:
            code = main(["--env", "tst", "--profile", "bs-chrome", "--report-dir", str(tmp_path / "r")])
        assert code == 2
        behave_main.assert_not_called()
        assert "BROWSERSTACK_USERNAME" in capsys.readouterr().err
        assert not (tmp_path / "r").exists()
