"""
Tests for well-known API path discovery.
"""

from unittest.mock import MagicMock

from device_discovery.config.config_loader import DEFAULT_ENDPOINT_PATHS
from device_discovery.core.content_analyzer import analyze_response
from device_discovery.scanners.endpoint_discoverer import EndpointDiscoverer


class FakeProbe:
    """fetch_endpoint() stand-in answering from a url -> (status, content type, body) map."""

    def __init__(self, responses):
        self.responses = responses
        self.requested = []

    def fetch_endpoint(self, url):
        self.requested.append(url)
        if url not in self.responses:
            return None
        status, content_type, body = self.responses[url]
        return analyze_response(url, status, content_type, None, body)


class TestEndpointDiscoverer:

    def test_results_in_path_order(self):
        probe = FakeProbe({
            "http://10.0.0.5:8080/health": (200, "application/json", '{"status": "ok"}'),
            "http://10.0.0.5:8080/api": (404, "text/plain", "not found"),
        })
        discoverer = EndpointDiscoverer(probe=probe, paths=["/api", "/rest", "/health"])

        results = discoverer.discover("10.0.0.5", 8080, False)

        assert [r.url for r in results] == [
            "http://10.0.0.5:8080/api",
            "http://10.0.0.5:8080/health",
        ]
        assert results[0].status_code == 404
        assert results[1].is_json is True
        assert probe.requested == [
            "http://10.0.0.5:8080/api",
            "http://10.0.0.5:8080/rest",
            "http://10.0.0.5:8080/health",
        ]

    def test_https_urls(self):
        probe = FakeProbe({})
        EndpointDiscoverer(probe=probe, paths=["/api"]).discover("10.0.0.5", 8443, True)
        assert probe.requested == ["https://10.0.0.5:8443/api"]

    def test_no_answers_gives_empty_list(self):
        discoverer = EndpointDiscoverer(probe=FakeProbe({}), paths=["/api", "/status"])
        assert discoverer.discover("10.0.0.5", 80, False) == []

    def test_repeated_discovery_is_identical(self):
        probe = FakeProbe({
            "http://10.0.0.5:80/openapi.json": (200, "application/json", '{"openapi": "3.1.0"}'),
        })
        discoverer = EndpointDiscoverer(probe=probe)

        first = discoverer.discover("10.0.0.5", 80, False)
        second = discoverer.discover("10.0.0.5", 80, False)

        assert first == second
        assert len(first) == 1
        assert first[0].is_openapi is True

    def test_default_paths(self):
        discoverer = EndpointDiscoverer(probe=MagicMock())
        assert discoverer.paths == DEFAULT_ENDPOINT_PATHS

    def test_default_probe_caps_redirects(self):
        discoverer = EndpointDiscoverer()
        try:
            assert discoverer.probe.session.max_redirects == 2
            assert discoverer.probe.timeout == 3.0
        finally:
            discoverer.probe.close()
