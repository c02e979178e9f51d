"""Tests for the command line entry point."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dorexport.core.models import ExportOutcome
from dorexport.main import build_parser, main

CONFIG_VALUES = {
    "DESTINATION": "/assembly",
    "API_BASE_URL": "http://dor",
    "EXPORT_PROFILE": "stanford",
    "ASSEMBLY_WF": "assemblyWF",
    "DELAY": 0,
}


@pytest.fixture
def app_config():
    mock_config = MagicMock()
    mock_config.all.return_value = dict(CONFIG_VALUES)
    mock_config.get.side_effect = lambda key, default=None: CONFIG_VALUES.get(key, default)
    with patch("dorexport.main.app_config", mock_config):
        yield mock_config


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_export_arguments(self):
        args = build_parser().parse_args(
            ["export", "/goobi/1234", "--title", "book_1234", "--profile", "stanford_unified", "--delay", "1.5"]
        )

        assert args.process_dir == "/goobi/1234"
        assert args.title == "book_1234"
        assert args.profile == "stanford_unified"
        assert args.delay == 1.5
        assert args.destination is None


class TestShardCommand:
    def test_prints_content_folder(self, app_config, capsys):
        assert main(["shard", "druid:bb018zb8894"]) == 0

        out = capsys.readouterr().out.strip()
        assert Path(out) == Path("/assembly/bb/018/zb/8894/bb018zb8894/content")

    def test_destination_override(self, app_config, capsys):
        assert main(["shard", "bb018zb8894", "--destination", "/other"]) == 0
        assert Path(capsys.readouterr().out.strip()) == Path("/other/bb/018/zb/8894/bb018zb8894/content")

    def test_invalid_identifier(self, app_config, capsys):
        assert main(["shard", "druid:short"]) == 1
        assert "unexpected length" in capsys.readouterr().err


class TestProfilesCommand:
    def test_lists_profiles(self, capsys):
        assert main(["profiles"]) == 0

        out = capsys.readouterr().out
        for name in ("stanford", "stanford_profiles", "stanford_unified"):
            assert name in out


class TestExportCommand:
    def test_success(self, app_config, tmp_path):
        with patch("dorexport.main.export_process", return_value=ExportOutcome(success=True)) as mock_export:
            assert main(["export", str(tmp_path), "--title", "book_1234"]) == 0

        folder = mock_export.call_args.args[0]
        settings = mock_export.call_args.kwargs["settings"]
        assert folder.title == "book_1234"
        assert folder.path == tmp_path
        assert settings.destination == Path("/assembly")
        assert settings.profile_name == "stanford"

    def test_overrides(self, app_config, tmp_path):
        with patch("dorexport.main.export_process", return_value=ExportOutcome(success=True)) as mock_export:
            main(
                [
                    "export",
                    str(tmp_path),
                    "--profile",
                    "stanford_profiles",
                    "--destination",
                    "/elsewhere",
                    "--api-base-url",
                    "http://other",
                    "--delay",
                    "4",
                ]
            )

        settings = mock_export.call_args.kwargs["settings"]
        assert settings.profile_name == "stanford_profiles"
        assert settings.destination == Path("/elsewhere")
        assert settings.api_base_url == "http://other"
        assert settings.delay == 4

    def test_failure_prints_problems(self, app_config, tmp_path, capsys):
        outcome = ExportOutcome().with_problem("Something went wrong: Not Found (404)")
        with patch("dorexport.main.export_process", return_value=outcome):
            assert main(["export", str(tmp_path)]) == 1

        assert "Something went wrong: Not Found (404)" in capsys.readouterr().err

    def test_unknown_profile(self, app_config, tmp_path, capsys):
        with patch("dorexport.main.export_process") as mock_export:
            assert main(["export", str(tmp_path), "--profile", "nope"]) == 1

        mock_export.assert_not_called()
        assert "Configuration error" in capsys.readouterr().err


class TestSettingsCommand:
    def test_prints_tabs_as_json(self, app_config, capsys, tmp_path, monkeypatch):
        monkeypatch.setenv("API_PASSWORD", "secret")
        with patch("dorexport.config.env.CONFIG_DIR", tmp_path):
            assert main(["settings"]) == 0

        tabs = json.loads(capsys.readouterr().out)
        export_tab = next(tab for tab in tabs if tab["name"] == "export")
        password = next(field for field in export_tab["fields"] if field["key"] == "API_PASSWORD")
        assert password["value"] == "********"
        app_config.refresh.assert_called_once()
