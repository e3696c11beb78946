"""
Tests for the command-line interface.
"""

import importlib
import signal
from datetime import datetime
from unittest.mock import patch

import pytest

from device_discovery.core.data_models import HostRecord, ScanResult, ScanStatus
from device_discovery.main import DeviceDiscoveryApp, create_argument_parser, main
from device_discovery.utils.logger import LogLevel, set_log_level

logger_module = importlib.import_module("device_discovery.utils.logger")


@pytest.fixture(autouse=True)
def restore_process_state():
    """Undo signal handlers and log level changes made by the app."""
    handlers = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    level = logger_module._min_level
    yield
    for sig, handler in handlers.items():
        signal.signal(sig, handler)
    set_log_level(level)


def completed_result():
    return ScanResult(
        scan_timestamp=datetime.now(),
        devices=[HostRecord("10.0.0.2", open_ports=[22])],
        scan_status=ScanStatus.COMPLETED,
    )


class TestArgumentParser:

    def test_defaults(self):
        args = create_argument_parser().parse_args([])
        assert args.subnets is None
        assert args.output is None
        assert args.save_dir is None
        assert args.skip_port_scan is False

    def test_all_options(self):
        args = create_argument_parser().parse_args([
            "--subnets", "10.0.0.0/24", "192.168.1.0/24",
            "--output", "scan.json",
            "--save-dir", "out",
            "--skip-port-scan",
            "--verbose",
        ])
        assert args.subnets == ["10.0.0.0/24", "192.168.1.0/24"]
        assert args.output == "scan.json"
        assert args.save_dir == "out"
        assert args.skip_port_scan is True
        assert args.verbose is True


@patch.object(DeviceDiscoveryApp, "_perform_preflight_checks", return_value=True)
class TestMain:

    @patch("device_discovery.main.ScannerOrchestrator")
    def test_successful_scan(self, mock_orchestrator, _checks):
        mock_orchestrator.return_value.execute_scan.return_value = completed_result()

        assert main(["--subnets", "10.0.0.0/29", "--output", "scan.json"]) == 0

        kwargs = mock_orchestrator.call_args.kwargs
        assert kwargs["output_path"] == "scan.json"
        assert kwargs["skip_port_scan"] is False
        mock_orchestrator.return_value.execute_scan.assert_called_once_with(["10.0.0.0/29"])

    @patch("device_discovery.main.ScannerOrchestrator")
    def test_no_subnets_exits_1(self, mock_orchestrator, _checks):
        mock_orchestrator.return_value.execute_scan.return_value = ScanResult(
            scan_timestamp=datetime.now(), scan_status=ScanStatus.FAILED
        )
        assert main(["--subnets", "bogus"]) == 1

    @patch("device_discovery.main.ScannerOrchestrator")
    def test_interrupt_exits_130(self, mock_orchestrator, _checks):
        mock_orchestrator.return_value.execute_scan.side_effect = KeyboardInterrupt
        assert main([]) == 130

    def test_missing_config_dir(self, _checks, tmp_path):
        assert main(["--config-dir", str(tmp_path / "missing")]) == 1

    @patch("device_discovery.main.ScannerOrchestrator")
    def test_verbose_sets_debug(self, mock_orchestrator, _checks):
        mock_orchestrator.return_value.execute_scan.return_value = completed_result()
        main(["--verbose"])
        assert logger_module._min_level == LogLevel.DEBUG


class TestPreflight:

    @patch("device_discovery.main.shutil.which", return_value=None)
    def test_missing_ping_fails(self, _which):
        assert main([]) == 1

    @patch("device_discovery.main.ScannerOrchestrator")
    @patch("device_discovery.main.shutil.which", return_value=None)
    def test_skip_checks_continues(self, _which, mock_orchestrator):
        mock_orchestrator.return_value.execute_scan.return_value = completed_result()
        assert main(["--skip-checks"]) == 0


class TestCreateConfig:

    def test_writes_default_config(self, tmp_path):
        assert main(["--create-config", "--config-dir", str(tmp_path)]) == 0
        assert (tmp_path / "scan_config.yml").exists()

    @patch.object(DeviceDiscoveryApp, "_perform_preflight_checks")
    def test_skips_scan(self, checks, tmp_path):
        main(["--create-config", "--config-dir", str(tmp_path)])
        checks.assert_not_called()

    def test_unwritable_location_exits_1(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        assert main(["--create-config", "--config-dir", str(blocker / "cfg")]) == 1


@patch.object(DeviceDiscoveryApp, "_perform_preflight_checks", return_value=True)
class TestErrorSummary:

    @patch("device_discovery.main.ScannerOrchestrator")
    def test_config_errors_shared_and_summarized(self, mock_orchestrator, _checks, tmp_path, capsys):
        (tmp_path / "scan_config.yml").write_text("liveness: [unclosed\n", encoding="utf-8")
        mock_orchestrator.return_value.execute_scan.return_value = completed_result()

        assert main(["--config-dir", str(tmp_path)]) == 0

        handler = mock_orchestrator.call_args.kwargs["error_handler"]
        assert handler.get_error_summary() == {"configuration_error": 1}
        assert "configuration_error: 1" in capsys.readouterr().out

    @patch("device_discovery.main.ScannerOrchestrator")
    def test_clean_run_has_no_error_section(self, mock_orchestrator, _checks, capsys):
        mock_orchestrator.return_value.execute_scan.return_value = completed_result()

        main([])

        assert "ERRORS" not in capsys.readouterr().out
