"""
Shared fixtures for the device discovery test suite.

Nothing here touches the network: probers, sessions and psutil are faked.
"""

import pytest

from device_discovery.core.content_analyzer import analyze_response
from device_discovery.core.data_models import HostRecord, ServiceProbeResult
from device_discovery.utils.logger import Logger, LogLevel


class FakeLivenessProber:
    """Answers for a fixed set of addresses and records every call."""

    def __init__(self, alive=()):
        self.alive = set(alive)
        self.calls = []

    def probe(self, address, timeout):
        self.calls.append(address)
        return address in self.alive


class FakePortProber:
    """Reports a fixed set of ports as open."""

    def __init__(self, open_ports=()):
        self.open_ports = set(open_ports)
        self.calls = []

    def is_open(self, address, port, timeout):
        self.calls.append(port)
        return port in self.open_ports


@pytest.fixture
def quiet_logger():
    """Logger that only prints errors."""
    return Logger("test", min_level=LogLevel.ERROR)


@pytest.fixture
def home_assistant_probe():
    return ServiceProbeResult(
        url="http://192.168.1.100:8123/",
        success=True,
        status_code=200,
        server="Python/3.11 aiohttp/3.9.1",
        title="Home Assistant",
        content_type="text/html; charset=utf-8",
        body="<html><head><title>Home Assistant</title></head></html>",
    )


@pytest.fixture
def openapi_result():
    return analyze_response(
        url="http://10.0.0.5:8080/openapi.json",
        status_code=200,
        content_type="application/json",
        server="uvicorn",
        body='{"openapi": "3.0.0", "info": {"title": "Demo"}, "paths": {}}',
    )


@pytest.fixture
def onvif_result():
    body = (
        '<?xml version="1.0"?>'
        '<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://www.w3.org/2003/05/soap-envelope" '
        'xmlns:tds="http://www.onvif.org/ver10/device/wsdl">'
        "<SOAP-ENV:Body><tds:GetDeviceInformationResponse/></SOAP-ENV:Body>"
        "</SOAP-ENV:Envelope>"
    )
    return analyze_response(
        url="http://10.0.0.9:80/onvif/device_service",
        status_code=200,
        content_type="application/soap+xml",
        server=None,
        body=body,
    )


@pytest.fixture
def ignorable_fault_result():
    body = (
        '<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://www.w3.org/2003/05/soap-envelope">'
        "<SOAP-ENV:Body><SOAP-ENV:Fault><SOAP-ENV:Reason><SOAP-ENV:Text>"
        "End of file or no input: message transfer interrupted"
        "</SOAP-ENV:Text></SOAP-ENV:Reason></SOAP-ENV:Fault></SOAP-ENV:Body>"
        "</SOAP-ENV:Envelope>"
    )
    return analyze_response(
        url="http://10.0.0.9:80/api",
        status_code=500,
        content_type="application/soap+xml",
        server="gSOAP/2.8",
        body=body,
    )


@pytest.fixture
def host_record():
    return HostRecord(ip_address="192.168.1.100", hostname="ha.local", open_ports=[22, 8123])
