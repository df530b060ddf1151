import json
from unittest.mock import AsyncMock, patch

import pytest

from passthenote_e2e import cli
from passthenote_e2e.exceptions import HookInstallError
from passthenote_e2e.precommit import Issue, ValidationReport


def run_cli(*argv):
    with pytest.raises(SystemExit) as exc:
        cli.main(list(argv))
    return exc.value.code


class TestCli:
    """Command line entry point"""

    def test_list(self, capsys):
        assert run_cli("list") == 0

        names = [s["name"] for s in json.loads(capsys.readouterr().out)]
        assert "tc_002_login_dashboard_assertions" in names

    def test_command_required(self):
        assert run_cli() == 2

    def test_run_reports_and_exits_nonzero_on_failure(self, capsys, tmp_path):
        summary = {
            "success": False, "passed": 0, "failed": 1, "skipped": 0,
            "results": [{
                "scenario": "tc_001_login_and_commerce_navigation",
                "success": False,
                "steps_executed": 8,
                "total_steps": 14,
                "results": [{"step": "Verify the COMMERCE box is visible",
                             "result": {"success": False, "error": "not visible"}}],
            }],
        }
        with patch("passthenote_e2e.cli.SuiteRunner") as runner_class:
            runner = runner_class.return_value
            runner.initialize = AsyncMock()
            runner.cleanup = AsyncMock()
            runner.run_suite = AsyncMock(return_value=summary)

            code = run_cli("run", "tc_001_login_and_commerce_navigation", "--headed",
                           "--report", str(tmp_path / "history.json"))

        assert code == 1
        settings = runner_class.call_args.args[0]
        assert settings.headless is False
        runner.run_suite.assert_awaited_once_with(["tc_001_login_and_commerce_navigation"])
        runner.cleanup.assert_awaited_once()
        runner.history.save.assert_called_once_with(tmp_path / "history.json")
        out = capsys.readouterr().out
        assert "FAIL  tc_001_login_and_commerce_navigation  (8/14 steps)" in out
        assert "not visible" in out

    def test_precommit_ok(self, capsys, tmp_path):
        report = ValidationReport(files_checked=3, checks_run=["compile"])
        with patch("passthenote_e2e.cli.precommit.run_checks", return_value=report) as run_checks:
            code = run_cli("precommit", "--all", "--skip-tests", "--root", str(tmp_path))

        assert code == 0
        run_checks.assert_called_once_with(tmp_path, staged_only=False, include_tests=False)
        assert "passed" in capsys.readouterr().out

    def test_precommit_failure(self, capsys, tmp_path):
        report = ValidationReport(issues=[Issue("naming", "tests/checks.py", "test modules must be named test_*.py")])
        with patch("passthenote_e2e.cli.precommit.run_checks", return_value=report):
            code = run_cli("precommit", "--root", str(tmp_path))

        assert code == 1
        assert "[naming] tests/checks.py" in capsys.readouterr().out

    def test_install_hook_error_exits_nonzero(self, tmp_path):
        with patch("passthenote_e2e.cli.precommit.install_hook",
                   side_effect=HookInstallError("not a git repository")):
            assert run_cli("precommit", "--install-hook", "--root", str(tmp_path)) == 1
