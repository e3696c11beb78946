"""
Scanner modules for Device Discovery.

This package contains the liveness sweep, the TCP port scanner and the
HTTP probes used for fingerprinting and API endpoint discovery.
"""

from .base_scanner import BaseScanner
from .liveness_scanner import LivenessProber, HostSweeper
from .port_scanner import PortProber, PortScanner
from .service_probe import ServiceProbe
from .endpoint_discoverer import EndpointDiscoverer

__all__ = [
    'BaseScanner',
    'LivenessProber',
    'HostSweeper',
    'PortProber',
    'PortScanner',
    'ServiceProbe',
    'EndpointDiscoverer'
]
