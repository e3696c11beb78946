"""
JSON Report Generator for Device Discovery Module.

Converts a ScanResult into the aggregate JSON document
{scanDate, subnets, deviceCount, devices[]} and writes it to disk.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.data_models import EndpointResult, HostRecord, ScanResult, Subnet
from .logger import Logger, get_logger


def subnet_to_dict(subnet: Subnet) -> Dict[str, Any]:
    return {
        "networkAddress": subnet.network_address,
        "prefixLength": subnet.prefix_length,
        "label": subnet.label,
        "cidr": subnet.cidr,
    }


def endpoint_to_dict(result: EndpointResult, include_body: bool = True) -> Dict[str, Any]:
    """
    Convert an EndpointResult to its JSON form.

    Ignorable SOAP faults never carry their body: rawBody is None and the
    snippet is blank.

    Args:
        result: Endpoint probe result
        include_body: Include the raw body (slim descriptors leave it out)
    """
    suppress = result.is_ignorable_soap_fault
    data = {
        "url": result.url,
        "statusCode": result.status_code,
        "contentType": result.content_type,
        "server": result.server,
        "title": result.title,
        "isJson": result.is_json,
        "jsonKeys": list(result.json_keys),
        "isSwaggerUI": result.is_swagger_ui,
        "isOpenApi": result.is_openapi,
        "isOnvif": result.is_onvif,
        "isSoapFault": result.is_soap_fault,
        "isIgnorableSoapFault": result.is_ignorable_soap_fault,
        "snippet": "" if suppress else result.snippet,
    }
    if include_body:
        data["rawBody"] = None if suppress else result.raw_body
    return data


def device_to_dict(device: HostRecord, include_bodies: bool = True) -> Dict[str, Any]:
    """
    Convert a HostRecord to its JSON form.

    Args:
        device: Host record
        include_bodies: Include raw endpoint bodies
    """
    return {
        "ipAddress": device.ip_address,
        "hostname": device.hostname,
        "openPorts": list(device.open_ports),
        "deviceType": device.device_type.value,
        "deviceName": device.device_name,
        "apiEndpoints": list(device.api_endpoints),
        "apiDetails": [endpoint_to_dict(r, include_body=include_bodies) for r in device.api_details],
    }


class JSONReporter:
    """
    Handles generation of the aggregate JSON report.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)

    def to_dict(self, scan_result: ScanResult) -> Dict[str, Any]:
        """
        Convert a ScanResult to a JSON-serializable dictionary.

        Devices keep the order in which their pipeline completed.
        """
        statistics = scan_result.statistics
        return {
            "scanDate": scan_result.scan_timestamp.isoformat(),
            "scanStatus": scan_result.scan_status.value,
            "subnets": [subnet_to_dict(subnet) for subnet in scan_result.subnets],
            "deviceCount": scan_result.device_count,
            "devices": [device_to_dict(device) for device in scan_result.devices],
            "statistics": {
                "hostsSwept": statistics.hosts_swept,
                "hostsAlive": statistics.hosts_alive,
                "devicesByType": dict(statistics.devices_by_type),
                "scanTimes": {k: round(v, 3) for k, v in statistics.scan_times.items()},
                "errorsEncountered": list(statistics.errors_encountered),
            },
        }

    def to_json(self, scan_result: ScanResult) -> str:
        return json.dumps(self.to_dict(scan_result), indent=2, ensure_ascii=False, default=str)

    def write_report(self, scan_result: ScanResult, output_path: str) -> str:
        """
        Write the aggregate report.

        Args:
            scan_result: Completed scan result
            output_path: Destination file; parent directories are created

        Returns:
            str: Path of the written file

        Raises:
            ValueError: If scan_result is None
            OSError: If the file cannot be written
        """
        if scan_result is None:
            raise ValueError("Scan result cannot be None")

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json(scan_result))

        self.logger.success(f"Report saved to: {path}")
        return str(path)
