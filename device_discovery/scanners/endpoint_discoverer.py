"""
Common API path discovery for the Device Discovery Module.
"""

from typing import List, Optional

from .base_scanner import BaseScanner
from .service_probe import ServiceProbe
from ..config.config_loader import DEFAULT_ENDPOINT_PATHS
from ..core.data_models import EndpointResult


class EndpointDiscoverer(BaseScanner):
    """
    Probes a fixed list of well-known API paths on one host:port.

    Every path that yields an HTTP response, whatever its status, produces
    an EndpointResult. A missing result means the connection itself failed.
    """

    scanner_type = "endpoint_discovery"

    def __init__(
        self,
        probe: Optional[ServiceProbe] = None,
        paths: Optional[List[str]] = None,
        logger=None,
    ):
        """
        Initialize the discoverer.

        Args:
            probe: ServiceProbe used for requests; defaults to a 3s timeout
                   with redirects capped at 2
            paths: API paths to try
            logger: Logger instance
        """
        super().__init__(logger)
        self.probe = probe or ServiceProbe(timeout=3.0, max_redirects=2)
        self.paths = list(paths) if paths else list(DEFAULT_ENDPOINT_PATHS)

    def discover(self, address: str, port: int, use_ssl: bool) -> List[EndpointResult]:
        """
        Probe every configured path on address:port.

        Args:
            address: Target IPv4 address
            port: TCP port
            use_ssl: Use HTTPS instead of HTTP

        Returns:
            List[EndpointResult]: One result per path that answered, in path order
        """
        results = []
        for path in self.paths:
            url = ServiceProbe.build_url(address, port, use_ssl, path)
            result = self.probe.fetch_endpoint(url)
            if result is None:
                self._log_debug(f"No response from {url}")
                continue

            results.append(result)
            self._log_debug(f"{url} -> {result.status_code} {self._describe(result)}")

        if results:
            self._log_info(f"{address}:{port}: {len(results)} of {len(self.paths)} API paths answered")
        return results

    @staticmethod
    def _describe(result: EndpointResult) -> str:
        flags = [
            name for name, value in (
                ("json", result.is_json),
                ("openapi", result.is_openapi),
                ("swagger-ui", result.is_swagger_ui),
                ("onvif", result.is_onvif),
                ("soap-fault", result.is_soap_fault),
            ) if value
        ]
        return f"[{', '.join(flags)}]" if flags else ""
