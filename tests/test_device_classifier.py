"""
Tests for rule-based device classification.
"""

import pytest

from device_discovery.core.content_analyzer import analyze_response
from device_discovery.core.data_models import DeviceType, HostRecord, ServiceProbeResult
from device_discovery.core.device_classifier import DeviceClassifier


@pytest.fixture
def classifier():
    return DeviceClassifier()


def probe_result(title=None, server=None, status_code=200, port=80, success=True):
    return ServiceProbeResult(
        url=f"http://10.0.0.7:{port}/",
        success=success,
        status_code=status_code if success else None,
        server=server,
        title=title,
    )


def json_result(path):
    return analyze_response(f"http://10.0.0.7:80{path}", 200, "application/json", None, '{"ok": true}')


class TestHttpRules:

    def test_home_assistant(self, classifier, host_record, home_assistant_probe):
        verdict = classifier.classify(host_record, [home_assistant_probe])

        assert verdict.device_type == DeviceType.IOT_HUB
        assert verdict.device_name == "Home Assistant"
        assert verdict.api_endpoints == ["http://192.168.1.100:8123/api/"]

    def test_shelly_from_server_header(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7", open_ports=[80]), [probe_result(server="Shelly 1PM")])

        assert verdict.device_type == DeviceType.IOT_DEVICE
        assert verdict.api_endpoints == ["http://10.0.0.7:80/status", "http://10.0.0.7:80/settings"]

    def test_case_insensitive_match(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7"), [probe_result(title="UNIFI Network")])
        assert verdict.device_type == DeviceType.NETWORK_SECURITY
        assert verdict.device_name == "Ubiquiti UniFi"

    def test_rule_order_beats_probe_order(self, classifier):
        probes = [
            probe_result(title="Node-RED", port=1880),
            probe_result(title="Home Assistant", port=8123),
        ]
        verdict = classifier.classify(HostRecord("10.0.0.7"), probes)

        assert verdict.device_name == "Home Assistant"
        assert verdict.api_endpoints == ["http://10.0.0.7:8123/api/"]

    def test_generic_web_server(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7", open_ports=[80]), [probe_result(server="nginx/1.24")])

        assert verdict.device_type == DeviceType.WEB_SERVER
        assert verdict.device_name == "nginx/1.24"
        assert verdict.api_endpoints == []

    def test_failed_probes_ignored(self, classifier):
        failed = probe_result(title="Home Assistant", success=False)
        verdict = classifier.classify(HostRecord("10.0.0.7"), [failed])
        assert verdict.device_type == DeviceType.UNKNOWN

    def test_non_200_without_match_is_not_web_server(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7"), [probe_result(status_code=401)])
        assert verdict.device_type == DeviceType.UNKNOWN


class TestPortRules:

    def test_ssh_is_linux(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7", open_ports=[22]), [])
        assert verdict.device_type == DeviceType.LINUX
        assert verdict.device_name is None

    def test_first_rule_wins(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7", open_ports=[445, 3389]), [])
        assert verdict.device_type == DeviceType.WINDOWS

    def test_home_assistant_port(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7", open_ports=[8123]), [])
        assert verdict.device_type == DeviceType.IOT_HUB
        assert verdict.device_name == "Possible Home Assistant"

    def test_http_rule_takes_precedence(self, classifier, host_record, home_assistant_probe):
        # host_record has port 22 open as well
        verdict = classifier.classify(host_record, [home_assistant_probe])
        assert verdict.device_type == DeviceType.IOT_HUB

    def test_no_evidence_is_unknown(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7", open_ports=[53]), [])
        assert verdict.device_type == DeviceType.UNKNOWN
        assert verdict.device_name is None


class TestEndpointRefinement:

    def test_onvif_refines_web_server(self, classifier, onvif_result):
        verdict = classifier.classify(
            HostRecord("10.0.0.9"), [probe_result(server="lighttpd")], [onvif_result]
        )
        assert verdict.device_type == DeviceType.NETWORK_SECURITY
        assert verdict.device_name == "ONVIF Camera/NVR"

    def test_openapi_refines_unknown(self, classifier, openapi_result):
        verdict = classifier.classify(HostRecord("10.0.0.5"), [], [openapi_result])
        assert verdict.device_type == DeviceType.WEB_SERVER
        assert verdict.device_name == "OpenAPI Service"

    def test_two_json_endpoints_keep_name(self, classifier):
        verdict = classifier.classify(
            HostRecord("10.0.0.7"),
            [probe_result(server="Express")],
            [json_result("/api"), json_result("/status")],
        )
        assert verdict.device_type == DeviceType.WEB_SERVER
        assert verdict.device_name == "Express"

    def test_single_json_endpoint_not_enough(self, classifier):
        verdict = classifier.classify(HostRecord("10.0.0.7"), [], [json_result("/api")])
        assert verdict.device_type == DeviceType.UNKNOWN

    def test_product_verdict_not_overridden(self, classifier, host_record, home_assistant_probe, onvif_result):
        verdict = classifier.classify(host_record, [home_assistant_probe], [onvif_result])
        assert verdict.device_type == DeviceType.IOT_HUB
        assert verdict.device_name == "Home Assistant"

    def test_port_verdict_not_overridden(self, classifier, openapi_result):
        verdict = classifier.classify(HostRecord("10.0.0.5", open_ports=[22]), [], [openapi_result])
        assert verdict.device_type == DeviceType.LINUX

    def test_endpoints_default_to_host_details(self, classifier, onvif_result):
        host = HostRecord("10.0.0.9")
        host.add_endpoint_result(onvif_result)
        verdict = classifier.classify(host, [])
        assert verdict.device_type == DeviceType.NETWORK_SECURITY
