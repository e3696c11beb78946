"""
Configuration loader for Device Discovery Module.
Handles loading and validation of the YAML scan configuration with fallback to defaults.
"""

import yaml
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, asdict
from pathlib import Path

from ..utils.error_handler import (
    ConfigurationError,
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    ErrorType,
)
from ..utils.logger import Logger

DEFAULT_CONFIG_FILE = "scan_config.yml"

DEFAULT_CANDIDATE_PORTS = [
    21, 22, 23, 25, 53, 80, 110, 143, 443, 445,
    3306, 3389, 5000, 5001, 8080, 8081, 8123, 8443, 9000,
]
DEFAULT_HTTP_PORTS = [80, 8080, 8081, 8123, 5000, 9000]
DEFAULT_HTTPS_PORTS = [443, 8443, 5001]
DEFAULT_ENDPOINT_PATHS = [
    "/api", "/api/v1", "/api/v2", "/rest", "/swagger",
    "/openapi.json", "/api-docs", "/status", "/info", "/health",
]


@dataclass
class LivenessConfig:
    """Configuration for the ICMP liveness sweep."""
    timeout: float = 0.5
    max_workers: int = 50


@dataclass
class PortScanConfig:
    """Configuration for TCP port scanning."""
    ports: List[int] = field(default_factory=lambda: list(DEFAULT_CANDIDATE_PORTS))
    timeout: float = 0.5
    http_ports: List[int] = field(default_factory=lambda: list(DEFAULT_HTTP_PORTS))
    https_ports: List[int] = field(default_factory=lambda: list(DEFAULT_HTTPS_PORTS))


@dataclass
class HTTPConfig:
    """Configuration for service probing and endpoint discovery."""
    timeout: float = 3.0
    max_redirects: int = 5
    endpoint_max_redirects: int = 2
    endpoint_paths: List[str] = field(default_factory=lambda: list(DEFAULT_ENDPOINT_PATHS))
    snippet_length: int = 512
    user_agent: str = "device-discovery/1.0"


@dataclass
class ScanConfig:
    """All scanner configuration sections."""
    liveness: LivenessConfig = field(default_factory=LivenessConfig)
    port_scan: PortScanConfig = field(default_factory=PortScanConfig)
    http: HTTPConfig = field(default_factory=HTTPConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConfigLoader:
    """
    Loads and validates the YAML scan configuration.
    Missing files, missing sections and invalid values fall back to defaults.
    """

    def __init__(self, config_dir: Optional[str] = None, error_handler: Optional[ErrorHandler] = None):
        """
        Initialize ConfigLoader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to the config directory relative to this file.
            error_handler: Handler that records unreadable configuration files
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent
        self.logger = Logger()
        self.error_handler = error_handler or ErrorHandler(self.logger)

    def load_config(self, config_file: str = DEFAULT_CONFIG_FILE) -> ScanConfig:
        """
        Load the scan configuration.

        Args:
            config_file: Name of the configuration file

        Returns:
            ScanConfig with loaded or default values
        """
        config_path = self.config_dir / config_file

        if not config_path.exists():
            self.logger.warning(f"Config file not found at {config_path}. Using default configuration.")
            return ScanConfig()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self._report(f"Error parsing config file {config_path}: {e}", config_path)
            return ScanConfig()
        except OSError as e:
            self._report(f"Cannot read config file {config_path}: {e}", config_path)
            return ScanConfig()

        if not isinstance(config_data, dict):
            self._report(f"Invalid config structure in {config_path}: expected a mapping", config_path)
            return ScanConfig()

        return ScanConfig(
            liveness=self._build_liveness(config_data.get("liveness") or {}),
            port_scan=self._build_port_scan(config_data.get("port_scan") or {}),
            http=self._build_http(config_data.get("http") or {}),
        )

    def _build_liveness(self, data: Dict[str, Any]) -> LivenessConfig:
        defaults = LivenessConfig()
        return LivenessConfig(
            timeout=self._validate_positive_float(data.get("timeout", defaults.timeout), "liveness.timeout", defaults.timeout),
            max_workers=self._validate_positive_int(data.get("max_workers", defaults.max_workers), "liveness.max_workers", defaults.max_workers),
        )

    def _build_port_scan(self, data: Dict[str, Any]) -> PortScanConfig:
        defaults = PortScanConfig()
        return PortScanConfig(
            ports=self._validate_ports(data.get("ports", defaults.ports), "port_scan.ports", defaults.ports),
            timeout=self._validate_positive_float(data.get("timeout", defaults.timeout), "port_scan.timeout", defaults.timeout),
            http_ports=self._validate_ports(data.get("http_ports", defaults.http_ports), "port_scan.http_ports", defaults.http_ports),
            https_ports=self._validate_ports(data.get("https_ports", defaults.https_ports), "port_scan.https_ports", defaults.https_ports),
        )

    def _build_http(self, data: Dict[str, Any]) -> HTTPConfig:
        defaults = HTTPConfig()
        paths = data.get("endpoint_paths", defaults.endpoint_paths)
        if not isinstance(paths, list) or not all(isinstance(p, str) and p.startswith("/") for p in paths):
            self.logger.warning(f"Invalid http.endpoint_paths: {paths}. Using default.")
            paths = defaults.endpoint_paths

        return HTTPConfig(
            timeout=self._validate_positive_float(data.get("timeout", defaults.timeout), "http.timeout", defaults.timeout),
            max_redirects=self._validate_non_negative_int(data.get("max_redirects", defaults.max_redirects), "http.max_redirects", defaults.max_redirects),
            endpoint_max_redirects=self._validate_non_negative_int(
                data.get("endpoint_max_redirects", defaults.endpoint_max_redirects),
                "http.endpoint_max_redirects",
                defaults.endpoint_max_redirects,
            ),
            endpoint_paths=paths,
            snippet_length=self._validate_positive_int(data.get("snippet_length", defaults.snippet_length), "http.snippet_length", defaults.snippet_length),
            user_agent=str(data.get("user_agent", defaults.user_agent)),
        )

    def _validate_positive_int(self, value: Any, field_name: str, default: int) -> int:
        """
        Validate that a value is a positive integer.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            default: Default value to use if validation fails

        Returns:
            Validated integer value or default
        """
        try:
            int_value = int(value)
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default
        if int_value <= 0:
            self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
            return default
        return int_value

    def _validate_non_negative_int(self, value: Any, field_name: str, default: int) -> int:
        try:
            int_value = int(value)
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default
        if int_value < 0:
            self.logger.warning(f"Invalid {field_name}: {value}. Must not be negative. Using default: {default}")
            return default
        return int_value

    def _validate_positive_float(self, value: Any, field_name: str, default: float) -> float:
        try:
            float_value = float(value)
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a number. Using default: {default}")
            return default
        if float_value <= 0:
            self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
            return default
        return float_value

    def _validate_ports(self, ports: Any, field_name: str, default: List[int]) -> List[int]:
        """
        Validate a list of TCP ports, dropping out-of-range entries.

        Args:
            ports: Ports to validate
            field_name: Name of the field for error messages
            default: Default list to use if nothing valid remains

        Returns:
            Validated list of ports or default
        """
        if not isinstance(ports, list):
            self.logger.warning(f"Invalid {field_name}: {ports}. Must be a list. Using default.")
            return list(default)

        valid_ports = []
        for port in ports:
            if isinstance(port, int) and 1 <= port <= 65535:
                if port not in valid_ports:
                    valid_ports.append(port)
            else:
                self.logger.warning(f"Invalid port in {field_name}: {port}. Skipping.")

        if not valid_ports:
            self.logger.warning(f"No valid ports in {field_name}. Using default.")
            return list(default)
        return valid_ports

    def _report(self, message: str, config_path: Path) -> None:
        context = ErrorContext(
            error_type=ErrorType.CONFIGURATION_ERROR,
            severity=ErrorSeverity.MEDIUM,
            operation="load_config",
            component="ConfigLoader",
            additional_info={"path": str(config_path)},
        )
        self.error_handler.handle_error(ConfigurationError(message, context), context)
        self.logger.warning("Using default configuration.")

    def create_default_config(self, config_file: str = DEFAULT_CONFIG_FILE) -> Path:
        """
        Create the default configuration file if it doesn't exist.

        Returns:
            Path: Location of the configuration file

        Raises:
            ConfigurationError: If the file cannot be written
        """
        config_path = self.config_dir / config_file
        if config_path.exists():
            self.logger.info(f"Config file already exists at {config_path}")
            return config_path

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                yaml.dump(ScanConfig().to_dict(), f, default_flow_style=False, indent=2, sort_keys=False)
        except OSError as e:
            context = ErrorContext(
                error_type=ErrorType.CONFIGURATION_ERROR,
                severity=ErrorSeverity.HIGH,
                operation="create_default_config",
                component="ConfigLoader",
                additional_info={"path": str(config_path)},
            )
            raise ConfigurationError(f"Failed to create default config at {config_path}: {e}", context) from e

        self.logger.info(f"Created default config at {config_path}")
        return config_path
