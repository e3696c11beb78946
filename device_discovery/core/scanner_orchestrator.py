"""
Scanner Orchestrator for Device Discovery Module.

This module provides the ScannerOrchestrator class that manages the complete
scan pipeline: subnet resolution → liveness sweep → port scan → service
probing → endpoint discovery → classification → reporting.
"""

import time
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from .data_models import (
    HostRecord,
    ScanResult,
    ScanStatistics,
    ScanStatus,
    ServiceProbeResult,
    Subnet,
)
from .device_classifier import DeviceClassifier
from .subnet_resolver import SubnetResolver
from ..config.config_loader import ScanConfig
from ..scanners.endpoint_discoverer import EndpointDiscoverer
from ..scanners.liveness_scanner import HostSweeper
from ..scanners.port_scanner import PortScanner
from ..scanners.service_probe import ServiceProbe
from ..utils.artifact_writer import ArtifactWriter
from ..utils.error_handler import (
    DeviceDiscoveryError,
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    ErrorType,
    OutputError,
)
from ..utils.json_reporter import JSONReporter
from ..utils.logger import get_logger
from ..utils.network_utils import ip_sort_key, resolve_hostname


class ScannerOrchestrator:
    """
    Orchestrates the complete device discovery pipeline.

    Subnets are processed in order. Within a subnet the liveness sweep runs
    in parallel; every later stage runs sequentially per host, and each
    host record is written only by the loop iteration handling that host.
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        skip_port_scan: bool = False,
        output_path: Optional[str] = None,
        save_dir: Optional[str] = None,
        resolver: Optional[SubnetResolver] = None,
        sweeper: Optional[HostSweeper] = None,
        port_scanner: Optional[PortScanner] = None,
        service_probe: Optional[ServiceProbe] = None,
        endpoint_discoverer: Optional[EndpointDiscoverer] = None,
        classifier: Optional[DeviceClassifier] = None,
        hostname_resolver: Callable[[str], Optional[str]] = resolve_hostname,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        Initialize the scanner orchestrator.

        Args:
            config: Scan configuration (defaults when None)
            skip_port_scan: Only run the liveness sweep
            output_path: Where to write the aggregate JSON report (optional)
            save_dir: Root directory for per-device artifacts (optional)
            resolver, sweeper, port_scanner, service_probe,
            endpoint_discoverer, classifier: Component overrides
            hostname_resolver: Reverse DNS function
            error_handler: Handler shared with the caller (a new one when None)
        """
        self.logger = get_logger(__name__)
        self.config = config or ScanConfig()
        self.skip_port_scan = skip_port_scan
        self.error_handler = error_handler or ErrorHandler(self.logger)

        http = self.config.http
        self.resolver = resolver or SubnetResolver(self.error_handler)
        self.sweeper = sweeper or HostSweeper(
            timeout=self.config.liveness.timeout,
            max_workers=self.config.liveness.max_workers,
            logger=self.logger,
        )
        self.port_scanner = port_scanner or PortScanner(
            ports=self.config.port_scan.ports,
            timeout=self.config.port_scan.timeout,
            logger=self.logger,
        )
        self.service_probe = service_probe or ServiceProbe(
            timeout=http.timeout,
            max_redirects=http.max_redirects,
            user_agent=http.user_agent,
            snippet_length=http.snippet_length,
        )
        self.endpoint_discoverer = endpoint_discoverer or EndpointDiscoverer(
            probe=ServiceProbe(
                timeout=http.timeout,
                max_redirects=http.endpoint_max_redirects,
                user_agent=http.user_agent,
                snippet_length=http.snippet_length,
            ),
            paths=http.endpoint_paths,
            logger=self.logger,
        )
        self.classifier = classifier or DeviceClassifier()
        self.hostname_resolver = hostname_resolver

        self.json_reporter = JSONReporter(self.logger) if output_path else None
        self.artifact_writer = ArtifactWriter(save_dir, self.error_handler) if save_dir else None
        self.output_path = output_path

        self.statistics = ScanStatistics()

    def execute_scan(self, cidrs: Optional[List[str]] = None) -> ScanResult:
        """
        Run the full pipeline.

        Args:
            cidrs: Subnets to scan; auto-discovered from local interfaces when empty

        Returns:
            ScanResult: FAILED when no subnet could be resolved, COMPLETED otherwise
        """
        try:
            return self._run_pipeline(cidrs)
        finally:
            self.close()

    def _run_pipeline(self, cidrs: Optional[List[str]]) -> ScanResult:
        self.logger.section("DEVICE DISCOVERY SCAN")
        scan_result = ScanResult(scan_timestamp=datetime.now(), scan_status=ScanStatus.IN_PROGRESS)
        self.statistics = ScanStatistics()
        scan_result.statistics = self.statistics
        started = time.monotonic()

        subnets = self._resolve_subnets(cidrs)
        scan_result.subnets = subnets
        if not subnets:
            context = ErrorContext(
                error_type=ErrorType.EMPTY_RESULT,
                severity=ErrorSeverity.CRITICAL,
                operation="execute_scan",
                component="ScannerOrchestrator",
            )
            self.error_handler.handle_error(DeviceDiscoveryError("No valid subnets to scan"), context)
            scan_result.scan_status = ScanStatus.FAILED
            self._finish(scan_result, started)
            return scan_result

        for subnet in subnets:
            scan_result.devices.extend(self._scan_subnet(subnet))

        scan_result.scan_status = ScanStatus.COMPLETED
        self._finish(scan_result, started)
        self._write_outputs(scan_result)
        return scan_result

    def close(self) -> None:
        """Close the HTTP sessions of both service probes."""
        probes = (self.service_probe, getattr(self.endpoint_discoverer, "probe", None))
        for probe in probes:
            close = getattr(probe, "close", None)
            if close is not None:
                close()

    def _resolve_subnets(self, cidrs: Optional[List[str]]) -> List[Subnet]:
        self.logger.progress_start("Resolving subnets")
        subnets = self.resolver.resolve(cidrs)
        self.logger.progress_end(f"Resolved {len(subnets)} subnet(s)")
        if subnets:
            self.logger.subnet_info([f"{s.cidr} ({s.label})" for s in subnets])
        return subnets

    def _scan_subnet(self, subnet: Subnet) -> List[HostRecord]:
        """
        Sweep one subnet and run the per-host pipeline on every responder.

        Args:
            subnet: Subnet to scan

        Returns:
            List[HostRecord]: Records in the order their pipeline finished
        """
        self.logger.section(f"SUBNET {subnet.cidr}")

        alive = self.sweeper.sweep(subnet)
        self.statistics.hosts_swept += getattr(self.sweeper, "addresses_probed", 0)
        self.statistics.hosts_alive += len(alive)
        self._add_time("liveness", getattr(self.sweeper, "last_duration", 0.0))

        if not alive:
            self.logger.warning(f"No responsive hosts found in {subnet.cidr}")
            return []

        self.logger.success(f"{len(alive)} responsive host(s) in {subnet.cidr}")

        records = []
        for address in sorted(alive, key=ip_sort_key):
            records.append(self.scan_host(address))
        return records

    def scan_host(self, address: str) -> HostRecord:
        """
        Run port scan, service probing, endpoint discovery and classification for one host.

        Args:
            address: Responsive IPv4 address

        Returns:
            HostRecord: Fully populated record
        """
        record = HostRecord(ip_address=address)
        record.hostname = self.hostname_resolver(address)

        service_probes: List[ServiceProbeResult] = []
        if not self.skip_port_scan:
            started = time.monotonic()
            for port in self.port_scanner.scan(address):
                record.add_open_port(port)
            self._add_time("port_scan", time.monotonic() - started)

            started = time.monotonic()
            for port, use_ssl in self._web_ports(record.open_ports):
                service_probes.append(self._probe_service(record, port, use_ssl))
            self._add_time("http", time.monotonic() - started)

        classification = self.classifier.classify(record, service_probes)
        record.apply_classification(classification)

        type_name = record.device_type.value
        self.statistics.devices_by_type[type_name] = self.statistics.devices_by_type.get(type_name, 0) + 1

        name = f" / {record.device_name}" if record.device_name else ""
        host = f" ({record.hostname})" if record.hostname else ""
        self.logger.info(f"{address}{host}: {type_name}{name}")
        return record

    def _web_ports(self, open_ports: List[int]) -> List[Tuple[int, bool]]:
        """Open ports of the HTTP and HTTPS families, paired with their use_ssl flag."""
        http_ports = set(self.config.port_scan.http_ports)
        https_ports = set(self.config.port_scan.https_ports)
        return [
            (port, port in https_ports)
            for port in open_ports
            if port in http_ports or port in https_ports
        ]

    def _probe_service(self, record: HostRecord, port: int, use_ssl: bool) -> ServiceProbeResult:
        probe = self.service_probe.probe(record.ip_address, port, use_ssl)
        if not probe.success:
            self.logger.debug(f"{probe.url}: {probe.error}")
            return probe

        self.logger.debug(
            f"{probe.url}: {probe.status_code} server={probe.server!r} title={probe.title!r}"
        )
        for result in self.endpoint_discoverer.discover(record.ip_address, port, use_ssl):
            record.add_endpoint_result(result)
            if result.status_code is not None and 200 <= result.status_code < 300:
                record.add_api_endpoint(result.url)
        return probe

    def _add_time(self, phase: str, seconds: float) -> None:
        self.statistics.scan_times[phase] = self.statistics.scan_times.get(phase, 0.0) + seconds

    def _finish(self, scan_result: ScanResult, started: float) -> None:
        self.statistics.scan_times["total"] = time.monotonic() - started
        self.statistics.errors_encountered = list(self.error_handler.messages)

    def _write_outputs(self, scan_result: ScanResult) -> None:
        """Write the aggregate report and device artifacts, if requested."""
        if self.json_reporter and self.output_path:
            try:
                self.json_reporter.write_report(scan_result, self.output_path)
            except OSError as e:
                context = ErrorContext(
                    error_type=ErrorType.FILE_ERROR,
                    severity=ErrorSeverity.HIGH,
                    operation="write_report",
                    component="ScannerOrchestrator",
                    additional_info={"path": self.output_path},
                )
                error = OutputError(f"Failed to write report {self.output_path}: {e}", context)
                self.error_handler.handle_error(error, context)

        if self.artifact_writer:
            self.artifact_writer.write_devices(scan_result.devices)
