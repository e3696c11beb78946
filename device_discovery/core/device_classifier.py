"""
Device Classification System for Device Discovery Module.

Classification runs in three ordered passes:
- HTTP fingerprint rules matched against page titles and Server headers
- Port-based fallback when no HTTP rule matched
- Endpoint evidence (ONVIF, OpenAPI, JSON APIs) refining Unknown and Web Server verdicts
"""

import re
from typing import Callable, List, Optional, Sequence
from dataclasses import dataclass, field

from .data_models import (
    Classification,
    DeviceType,
    EndpointResult,
    HostRecord,
    ServiceProbeResult,
)


@dataclass
class ClassificationRule:
    """
    An HTTP fingerprint rule.

    Attributes:
        name: Human-readable name for the rule
        pattern: Regex searched (case-insensitive) in title and Server header
        device_type: The device type this rule classifies to
        device_name: Device name assigned on match
        endpoint_paths: Paths appended to the matching probe's base URL
    """
    name: str
    pattern: str
    device_type: DeviceType
    device_name: str
    endpoint_paths: List[str] = field(default_factory=list)

    def matches(self, probe: ServiceProbeResult) -> bool:
        return any(
            text and re.search(self.pattern, text, re.IGNORECASE)
            for text in (probe.title, probe.server)
        )


@dataclass
class PortRule:
    """A port-based fallback rule."""
    port: int
    device_type: DeviceType
    device_name: Optional[str] = None


@dataclass
class EvidenceRule:
    """An endpoint evidence rule for the refinement pass."""
    name: str
    predicate: Callable[[List[EndpointResult]], bool]
    device_type: DeviceType
    device_name: Optional[str] = None


# Verdicts the refinement pass may change
REFINABLE_TYPES = (DeviceType.UNKNOWN, DeviceType.WEB_SERVER)


class DeviceClassifier:
    """
    Rule-based device classifier.

    Rules within each pass are evaluated in list order and the first match
    wins; list order is the priority order.
    """

    def __init__(self):
        """Initialize the device classifier with predefined rules."""
        self.http_rules = self._initialize_http_rules()
        self.port_rules = self._initialize_port_rules()
        self.evidence_rules = self._initialize_evidence_rules()

    def classify(
        self,
        host: HostRecord,
        service_probes: Sequence[ServiceProbeResult],
        endpoint_results: Optional[Sequence[EndpointResult]] = None,
    ) -> Classification:
        """
        Classify a host from its open ports, service probes and endpoint results.

        Args:
            host: Host record (open ports are read from it)
            service_probes: Fingerprinting results for the host's HTTP(S) ports
            endpoint_results: Endpoint discovery results; defaults to host.api_details

        Returns:
            Classification verdict with any endpoints the matched rule registers
        """
        successful = [probe for probe in service_probes if probe.success]
        endpoints = list(endpoint_results if endpoint_results is not None else host.api_details)

        classification = self.classify_http(successful)
        if classification.device_type == DeviceType.UNKNOWN:
            classification = self.classify_ports(host.open_ports)
        return self.refine_with_endpoints(classification, endpoints)

    def classify_http(self, probes: Sequence[ServiceProbeResult]) -> Classification:
        """
        Apply the HTTP fingerprint rules.

        Each rule is tried against every probe before the next rule, so a
        higher-priority product match on any port beats a generic one.
        """
        for rule in self.http_rules:
            for probe in probes:
                if rule.matches(probe):
                    return Classification(
                        device_type=rule.device_type,
                        device_name=rule.device_name,
                        api_endpoints=[f"{probe.base_url}{path}" for path in rule.endpoint_paths],
                    )

        for probe in probes:
            if probe.status_code == 200:
                return Classification(device_type=DeviceType.WEB_SERVER, device_name=probe.server)

        return Classification()

    def classify_ports(self, open_ports: Sequence[int]) -> Classification:
        """Guess a device type from open ports alone."""
        for rule in self.port_rules:
            if rule.port in open_ports:
                return Classification(device_type=rule.device_type, device_name=rule.device_name)
        return Classification()

    def refine_with_endpoints(
        self, classification: Classification, endpoints: Sequence[EndpointResult]
    ) -> Classification:
        """
        Refine Unknown and Web Server verdicts using endpoint evidence.

        Verdicts from product rules (IoT hubs, IoT devices, named network
        devices) and port rules are left untouched.
        """
        if classification.device_type not in REFINABLE_TYPES or not endpoints:
            return classification

        for rule in self.evidence_rules:
            if rule.predicate(list(endpoints)):
                return Classification(
                    device_type=rule.device_type,
                    device_name=rule.device_name or classification.device_name,
                    api_endpoints=classification.api_endpoints,
                )
        return classification

    def _initialize_http_rules(self) -> List[ClassificationRule]:
        return [
            ClassificationRule(
                name="Home Assistant",
                pattern=r"Home Assistant",
                device_type=DeviceType.IOT_HUB,
                device_name="Home Assistant",
                endpoint_paths=["/api/"],
            ),
            ClassificationRule(
                name="Shelly",
                pattern=r"Shelly",
                device_type=DeviceType.IOT_DEVICE,
                device_name="Shelly",
                endpoint_paths=["/status", "/settings"],
            ),
            ClassificationRule(
                name="UniFi",
                pattern=r"UniFi",
                device_type=DeviceType.NETWORK_SECURITY,
                device_name="Ubiquiti UniFi",
                endpoint_paths=["/api/"],
            ),
            ClassificationRule(
                name="Node-RED",
                pattern=r"Node-RED",
                device_type=DeviceType.IOT_HUB,
                device_name="Node-RED",
                endpoint_paths=["/flows"],
            ),
            ClassificationRule(
                name="openHAB",
                pattern=r"openHAB",
                device_type=DeviceType.IOT_HUB,
                device_name="openHAB",
                endpoint_paths=["/rest/"],
            ),
        ]

    def _initialize_port_rules(self) -> List[PortRule]:
        return [
            PortRule(port=22, device_type=DeviceType.LINUX),
            PortRule(port=3389, device_type=DeviceType.WINDOWS),
            PortRule(port=445, device_type=DeviceType.SMB),
            PortRule(port=8123, device_type=DeviceType.IOT_HUB, device_name="Possible Home Assistant"),
        ]

    def _initialize_evidence_rules(self) -> List[EvidenceRule]:
        return [
            EvidenceRule(
                name="ONVIF",
                predicate=lambda results: any(r.is_onvif for r in results),
                device_type=DeviceType.NETWORK_SECURITY,
                device_name="ONVIF Camera/NVR",
            ),
            EvidenceRule(
                name="OpenAPI",
                predicate=lambda results: any(r.is_openapi or r.is_swagger_ui for r in results),
                device_type=DeviceType.WEB_SERVER,
                device_name="OpenAPI Service",
            ),
            EvidenceRule(
                name="JSON API",
                predicate=lambda results: sum(1 for r in results if r.is_json) >= 2,
                device_type=DeviceType.WEB_SERVER,
            ),
        ]
