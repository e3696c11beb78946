"""
Main entry point for the Device Discovery Module.

This module provides the command-line interface for the discovery tool,
including argument parsing, pre-flight checks, and graceful shutdown handling.
"""

import argparse
import shutil
import signal
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config.config_loader import ConfigLoader
from .core.data_models import ScanResult, ScanStatus
from .core.scanner_orchestrator import ScannerOrchestrator
from .utils.error_handler import ConfigurationError, ErrorHandler
from .utils.json_reporter import JSONReporter
from .utils.logger import LogLevel, get_logger, set_log_level


class DeviceDiscoveryApp:
    """
    Main application class for Device Discovery Module.

    Handles CLI interface, pre-flight checks, and application lifecycle.
    """

    REQUIRED_PACKAGES = ["colorama", "yaml", "requests", "psutil"]

    def __init__(self):
        """Initialize the application."""
        self.logger = get_logger(__name__)
        self.orchestrator: Optional[ScannerOrchestrator] = None
        self.shutdown_requested = False

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        """
        Handle shutdown signals gracefully.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_names = {signal.SIGINT: "SIGINT", signal.SIGTERM: "SIGTERM"}
        signal_name = signal_names.get(signum, f"Signal {signum}")

        if not self.shutdown_requested:
            self.logger.warning(f"Received {signal_name} - stopping scan...")
            self.shutdown_requested = True
            raise KeyboardInterrupt
        self.logger.error("Force shutdown requested - terminating immediately")
        sys.exit(1)

    def _perform_preflight_checks(self) -> bool:
        """
        Check for the ping binary and required Python packages.

        Returns:
            bool: True if all checks pass, False otherwise
        """
        self.logger.section("PRE-FLIGHT CHECKS")
        all_checks_passed = True

        ping_path = shutil.which("ping")
        if ping_path:
            self.logger.debug(f"Found ping at: {ping_path}")
        else:
            all_checks_passed = False
            self.logger.error("Required tool 'ping' not found in PATH")
            self.logger.info("  • Ubuntu/Debian: sudo apt-get install iputils-ping")
            self.logger.info("  • CentOS/RHEL: sudo yum install iputils")

        missing = []
        for package in self.REQUIRED_PACKAGES:
            try:
                __import__(package)
            except ImportError:
                missing.append(package)
        if missing:
            all_checks_passed = False
            self.logger.error(f"Missing Python dependencies: {', '.join(missing)}")
            self.logger.info("Install missing dependencies with: pip install -e .")

        if all_checks_passed:
            self.logger.success("All pre-flight checks passed")
        return all_checks_passed

    def _validate_paths(self, args: argparse.Namespace) -> bool:
        """Check that the config directory exists when one is given."""
        if args.config_dir:
            config_path = Path(args.config_dir)
            if not config_path.is_dir():
                self.logger.error(f"Configuration directory does not exist: {args.config_dir}")
                return False
        return True

    def _print_summary(self, scan_result: ScanResult) -> None:
        """Print a table of discovered devices."""
        self.logger.section("DISCOVERED DEVICES")
        if not scan_result.devices:
            self.logger.warning("No devices discovered")
            return

        widths = [15, 24, 24, 22, 20, 9]
        self.logger.table_header(
            ["IP Address", "Hostname", "Device Type", "Device Name", "Open Ports", "Endpoints"],
            widths,
        )
        for device in scan_result.devices:
            self.logger.table_row(
                [
                    device.ip_address,
                    device.hostname or "-",
                    device.device_type.value,
                    device.device_name or "-",
                    ",".join(str(p) for p in device.open_ports) or "-",
                    str(len(device.api_endpoints)),
                ],
                widths,
                highlight=bool(device.api_endpoints),
            )
        self.logger.info(f"Total devices: {scan_result.device_count}")

    def _print_error_summary(self, error_handler: ErrorHandler) -> None:
        summary = error_handler.get_error_summary()
        if not summary:
            return
        self.logger.section("ERRORS")
        for error_type, count in summary.items():
            self.logger.warning(f"{error_type}: {count}")

    def _create_config(self, args: argparse.Namespace) -> int:
        """Write the default scan_config.yml and exit."""
        try:
            config_path = ConfigLoader(args.config_dir).create_default_config()
        except ConfigurationError as e:
            self.logger.error(str(e))
            return 1
        self.logger.success(f"Configuration file: {config_path}")
        return 0

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the device discovery application.

        Args:
            args: Parsed command line arguments

        Returns:
            int: Exit code (0 for success, non-zero for failure)
        """
        if args.create_config:
            return self._create_config(args)

        try:
            if not self._perform_preflight_checks():
                if not args.skip_checks:
                    self.logger.error("Pre-flight checks failed. Use --skip-checks to bypass.")
                    return 1
                self.logger.warning("Skipping pre-flight checks as requested")

            if not self._validate_paths(args):
                return 1

            error_handler = ErrorHandler(self.logger)
            config = ConfigLoader(args.config_dir, error_handler).load_config()

            self.orchestrator = ScannerOrchestrator(
                config=config,
                skip_port_scan=args.skip_port_scan,
                output_path=args.output,
                save_dir=args.save_dir,
                error_handler=error_handler,
            )
            scan_result = self.orchestrator.execute_scan(args.subnets)

            if scan_result.scan_status == ScanStatus.FAILED:
                self._print_error_summary(error_handler)
                self.logger.error("No subnets to scan - aborting")
                return 1

            self._print_summary(scan_result)
            self._print_error_summary(error_handler)
            if args.json:
                print(JSONReporter(self.logger).to_json(scan_result))

            self.logger.success("Device discovery completed")
            return 0

        except KeyboardInterrupt:
            self.logger.warning("Scan interrupted by user")
            return 130


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="device_discovery",
        description="Device Discovery - find devices and candidate APIs on local subnets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m device_discovery                                  # Scan subnets of local interfaces
  python -m device_discovery --subnets 192.168.1.0/24         # Scan a given subnet
  python -m device_discovery --output scan.json               # Save the aggregate report
  python -m device_discovery --save-dir ./devices             # Save per-device artifacts
  python -m device_discovery --skip-port-scan                 # Liveness sweep only
  python -m device_discovery --create-config --config-dir ./cfg  # Write the default config
        """
    )

    parser.add_argument(
        "--subnets",
        nargs="+",
        metavar="CIDR",
        help="Subnets to scan in A.B.C.D/P notation. Defaults to the subnets of local interfaces"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Path for the aggregate JSON report. Without it results are only printed"
    )

    parser.add_argument(
        "--save-dir",
        type=str,
        help="Directory for per-device descriptors and endpoint bodies"
    )

    parser.add_argument(
        "--skip-port-scan",
        action="store_true",
        help="Only check host liveness; skip port scanning and HTTP probing"
    )

    parser.add_argument(
        "--config-dir",
        type=str,
        help="Directory containing scan_config.yml. Defaults to device_discovery/config/"
    )

    parser.add_argument(
        "--create-config",
        action="store_true",
        help="Write the default scan_config.yml into the config directory and exit"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Also print the aggregate JSON to the console"
    )

    parser.add_argument(
        "--skip-checks",
        action="store_true",
        help="Continue even if pre-flight checks fail"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Device Discovery {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Device Discovery Module.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_log_level(LogLevel.DEBUG)

    app = DeviceDiscoveryApp()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
