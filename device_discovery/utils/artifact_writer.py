"""
Per-device artifact writer for Device Discovery Module.

Layout under the save directory:

    <ip>/device.json                    slim descriptor (no raw bodies)
    <ip>/endpoints/<name><ext>          endpoint body (.json/.xml/.html/.txt)
    <ip>/endpoints/<name>.meta.json     status, content type, flags, lastUpdated

Every file is written independently; a failure is reported and the next
file is attempted.
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from ..core.content_analyzer import content_extension
from ..core.data_models import EndpointResult, HostRecord
from .error_handler import ErrorHandler, ErrorContext, ErrorType, ErrorSeverity, OutputError
from .json_reporter import device_to_dict

CONTENT_EXTENSIONS = (".json", ".xml", ".html", ".txt")


def endpoint_file_stem(url: str) -> str:
    """
    Build a filesystem-safe name for an endpoint URL.

    "http://10.0.0.5:8080/api/v1" -> "http_8080_api_v1"
    """
    parsed = urlparse(url)
    port = parsed.port or (443 if parsed.scheme == "https" else 80)
    path = re.sub(r"[^A-Za-z0-9]+", "_", parsed.path).strip("_") or "root"
    return f"{parsed.scheme}_{port}_{path}"


class ArtifactWriter:
    """Writes device descriptors and endpoint bodies to a directory tree."""

    def __init__(self, save_dir: str, error_handler: Optional[ErrorHandler] = None):
        self.save_dir = Path(save_dir)
        self.error_handler = error_handler or ErrorHandler()
        self.logger = self.error_handler.logger
        self.files_written = 0

    def write_devices(self, devices: List[HostRecord]) -> None:
        for device in devices:
            self.write_device(device)
        self.logger.info(f"Saved {self.files_written} artifact file(s) under {self.save_dir}")

    def write_device(self, device: HostRecord) -> Path:
        """
        Write one device's descriptor and endpoint files.

        Args:
            device: Host record to persist

        Returns:
            Path: The device directory
        """
        device_dir = self.save_dir / device.ip_address
        endpoints_dir = device_dir / "endpoints"

        self._write_file(
            device_dir / "device.json",
            json.dumps(device_to_dict(device, include_bodies=False), indent=2, ensure_ascii=False),
        )
        for result in device.api_details:
            self.write_endpoint(endpoints_dir, result)
        return device_dir

    def write_endpoint(self, endpoints_dir: Path, result: EndpointResult) -> None:
        """
        Write one endpoint's body and metadata sidecar.

        Ignorable SOAP faults never get a body file; any body files left
        from earlier scans for the same endpoint are removed.
        """
        stem = endpoint_file_stem(result.url)

        if result.is_ignorable_soap_fault:
            self._remove_stale_content(endpoints_dir, stem)
        elif result.raw_body is not None:
            self._write_file(endpoints_dir / f"{stem}{content_extension(result)}", result.raw_body)

        metadata = {
            "url": result.url,
            "statusCode": result.status_code,
            "contentType": result.content_type,
            "isJson": result.is_json,
            "isOpenApi": result.is_openapi,
            "isSwaggerUI": result.is_swagger_ui,
            "isOnvif": result.is_onvif,
            "isSoapFault": result.is_soap_fault,
            "isIgnorableSoapFault": result.is_ignorable_soap_fault,
            "lastUpdated": datetime.now().isoformat(),
        }
        self._write_file(endpoints_dir / f"{stem}.meta.json", json.dumps(metadata, indent=2))

    def _remove_stale_content(self, endpoints_dir: Path, stem: str) -> None:
        for extension in CONTENT_EXTENSIONS:
            path = endpoints_dir / f"{stem}{extension}"
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                self._report(e, "remove_stale_content", path)

    def _write_file(self, path: Path, content: str) -> bool:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            self._report(e, "write_file", path)
            return False
        self.files_written += 1
        return True

    def _report(self, error: Exception, operation: str, path: Path) -> None:
        context = ErrorContext(
            error_type=ErrorType.FILE_ERROR,
            severity=ErrorSeverity.MEDIUM,
            operation=operation,
            component="ArtifactWriter",
            additional_info={"path": str(path)},
        )
        self.error_handler.handle_error(OutputError(f"{path}: {error}", context), context)
