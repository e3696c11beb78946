"""
Core data models and enums for the Device Discovery Module.

This module defines the data structures used throughout the discovery process,
including subnets, host records, endpoint probe results and the final scan result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Tuple
from datetime import datetime


class DeviceType(Enum):
    """Enumeration of device types that can be assigned during classification."""
    UNKNOWN = "Unknown"
    IOT_HUB = "IoT Hub"
    IOT_DEVICE = "IoT Device"
    NETWORK_SECURITY = "Network/Security Device"
    WEB_SERVER = "Web Server"
    LINUX = "Linux/Unix Device"
    WINDOWS = "Windows Device"
    SMB = "SMB/CIFS Device"


class ScanStatus(Enum):
    """Enumeration of possible scan statuses."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Subnet:
    """
    An IPv4 subnet to sweep.

    Attributes:
        network_address: Network address (e.g., 192.168.1.0)
        prefix_length: CIDR prefix length (0-32)
        label: Where the subnet came from (interface name or user input)
    """
    network_address: str
    prefix_length: int
    label: str = ""

    @property
    def cidr(self) -> str:
        return f"{self.network_address}/{self.prefix_length}"


@dataclass(frozen=True)
class EndpointResult:
    """
    Outcome of a single HTTP probe against one (host, port, path).

    Attributes:
        url: URL that was requested
        status_code: HTTP status code of the response
        content_type: Content-Type header value
        server: Server header value
        title: HTML <title> if present
        is_json: Whether the body looks like JSON
        json_keys: Up to 10 top-level keys (or first array element field names)
        is_swagger_ui: Whether the body is a Swagger UI page
        is_openapi: Whether the body is an OpenAPI/Swagger document
        is_onvif: Whether the body is an ONVIF SOAP response
        is_soap_fault: Whether the body contains a SOAP fault
        is_ignorable_soap_fault: Whether the fault is a known transient one
        snippet: First characters of the body for inspection
        raw_body: Full response body
    """
    url: str
    status_code: Optional[int] = None
    content_type: Optional[str] = None
    server: Optional[str] = None
    title: Optional[str] = None
    is_json: bool = False
    json_keys: Tuple[str, ...] = ()
    is_swagger_ui: bool = False
    is_openapi: bool = False
    is_onvif: bool = False
    is_soap_fault: bool = False
    is_ignorable_soap_fault: bool = False
    snippet: str = ""
    raw_body: Optional[str] = None


@dataclass
class ServiceProbeResult:
    """
    Outcome of a fingerprinting request against host:port.

    Unsuccessful results carry only the URL and an error description.
    """
    url: str
    success: bool = False
    status_code: Optional[int] = None
    server: Optional[str] = None
    title: Optional[str] = None
    content_type: Optional[str] = None
    body: Optional[str] = None
    error: Optional[str] = None

    @property
    def base_url(self) -> str:
        """URL without a trailing slash, used to build endpoint URLs."""
        return self.url.rstrip("/")


@dataclass
class Classification:
    """Verdict produced by the device classifier."""
    device_type: DeviceType = DeviceType.UNKNOWN
    device_name: Optional[str] = None
    api_endpoints: List[str] = field(default_factory=list)


@dataclass
class HostRecord:
    """
    Information about a discovered host.

    Fields are populated in defined stages: liveness creates the record,
    port scanning adds ports, endpoint discovery adds endpoint results and
    classification sets the verdict.

    Attributes:
        ip_address: IP address of the host
        hostname: Reverse DNS name (if resolvable)
        open_ports: Open TCP ports in candidate order
        device_type: Classified device type
        device_name: Classified device name
        api_endpoints: Known API endpoint URLs (insertion ordered, unique)
        api_details: Endpoint probe results
    """
    ip_address: str
    hostname: Optional[str] = None
    open_ports: List[int] = field(default_factory=list)
    device_type: DeviceType = DeviceType.UNKNOWN
    device_name: Optional[str] = None
    api_endpoints: List[str] = field(default_factory=list)
    api_details: List[EndpointResult] = field(default_factory=list)

    def add_open_port(self, port: int) -> None:
        if port not in self.open_ports:
            self.open_ports.append(port)

    def add_api_endpoint(self, url: str) -> None:
        if url not in self.api_endpoints:
            self.api_endpoints.append(url)

    def add_endpoint_result(self, result: EndpointResult) -> None:
        self.api_details.append(result)

    def apply_classification(self, classification: Classification) -> None:
        self.device_type = classification.device_type
        self.device_name = classification.device_name
        for url in classification.api_endpoints:
            self.add_api_endpoint(url)


@dataclass
class ScanStatistics:
    """
    Statistics about the completed scan.

    Attributes:
        hosts_swept: Number of candidate addresses probed for liveness
        hosts_alive: Number of addresses that answered
        devices_by_type: Count of devices per device type
        scan_times: Duration of each scan phase in seconds
        errors_encountered: Non-fatal errors reported during the scan
    """
    hosts_swept: int = 0
    hosts_alive: int = 0
    devices_by_type: Dict[str, int] = field(default_factory=dict)
    scan_times: Dict[str, float] = field(default_factory=dict)
    errors_encountered: List[str] = field(default_factory=list)


@dataclass
class ScanResult:
    """
    Complete result of a device discovery scan.

    Attributes:
        scan_timestamp: When the scan was started
        subnets: Subnets that were scanned, in processing order
        devices: Host records, in the order their pipeline completed
        scan_status: Overall status of the scan
        statistics: Scan statistics
    """
    scan_timestamp: datetime
    subnets: List[Subnet] = field(default_factory=list)
    devices: List[HostRecord] = field(default_factory=list)
    scan_status: ScanStatus = ScanStatus.NOT_STARTED
    statistics: ScanStatistics = field(default_factory=ScanStatistics)

    @property
    def device_count(self) -> int:
        return len(self.devices)
