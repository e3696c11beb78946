"""
HTTP/HTTPS service fingerprinting for the Device Discovery Module.

Every ServiceProbe owns a dedicated requests.Session with certificate
verification disabled. Local devices commonly serve self-signed
certificates; the override lives on this session only and never touches
other HTTP clients in the process.

Bodies are streamed and read only up to a byte cap or until the request
timeout has elapsed, so endless streams (MJPEG cameras, long-polls) cannot
stall a scan.
"""

import time
import warnings
from typing import Optional

import requests
from urllib3.exceptions import InsecureRequestWarning

from ..core.content_analyzer import analyze_response, extract_title, SNIPPET_LENGTH
from ..core.data_models import EndpointResult, ServiceProbeResult

MAX_BODY_BYTES = 1024 * 1024
CHUNK_SIZE = 4096


class ServiceProbe:
    """
    Issues single GET requests against host:port and reports what came back.

    Transport and protocol errors are converted into unsuccessful results;
    nothing raises past this class.
    """

    def __init__(
        self,
        timeout: float = 3.0,
        max_redirects: int = 5,
        user_agent: str = "device-discovery/1.0",
        snippet_length: int = SNIPPET_LENGTH,
        max_body_bytes: int = MAX_BODY_BYTES,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the probe.

        Args:
            timeout: Request timeout in seconds
            max_redirects: Redirects followed before giving up
            user_agent: User-Agent header sent with every request
            snippet_length: Snippet length for endpoint results
            max_body_bytes: Body bytes read before the rest is discarded
            session: Session to use instead of a new one (tests)
        """
        self.timeout = timeout
        self.snippet_length = snippet_length
        self.max_body_bytes = max_body_bytes

        self.session = session or requests.Session()
        self.session.verify = False
        self.session.max_redirects = max_redirects
        self.session.headers.update({"User-Agent": user_agent})

    @staticmethod
    def build_url(address: str, port: int, use_ssl: bool, path: str = "/") -> str:
        scheme = "https" if use_ssl else "http"
        return f"{scheme}://{address}:{port}{path}"

    def _get(self, url: str, timeout: Optional[float] = None) -> requests.Response:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", InsecureRequestWarning)
            return self.session.get(
                url, timeout=timeout or self.timeout, allow_redirects=True, stream=True
            )

    def _read_body(self, response: requests.Response, timeout: Optional[float] = None) -> str:
        """
        Read a streamed body up to the byte cap or the deadline, then close it.

        Args:
            response: Response opened with stream=True
            timeout: Seconds allowed for reading; the probe default when None

        Returns:
            str: Decoded prefix of the body
        """
        deadline = time.monotonic() + (timeout or self.timeout)
        chunks = []
        received = 0
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                chunks.append(chunk)
                received += len(chunk)
                if received >= self.max_body_bytes or time.monotonic() >= deadline:
                    break
        except requests.exceptions.RequestException:
            # Connection dropped mid-body; keep what arrived
            pass
        finally:
            response.close()

        raw = b"".join(chunks)[:self.max_body_bytes]
        try:
            return raw.decode(response.encoding or "utf-8", errors="replace")
        except LookupError:
            return raw.decode("utf-8", errors="replace")

    def probe(
        self,
        address: str,
        port: int,
        use_ssl: bool,
        timeout: Optional[float] = None,
        path: str = "/",
    ) -> ServiceProbeResult:
        """
        Fingerprint the service on address:port.

        Args:
            address: Target IPv4 address
            port: TCP port
            use_ssl: Use HTTPS instead of HTTP
            timeout: Request timeout; the probe default when None
            path: Request path

        Returns:
            ServiceProbeResult; success=False carries only the URL and error
        """
        url = self.build_url(address, port, use_ssl, path)
        try:
            response = self._get(url, timeout)
        except requests.exceptions.RequestException as e:
            return ServiceProbeResult(url=url, success=False, error=f"{type(e).__name__}: {e}")

        body = self._read_body(response, timeout)
        return ServiceProbeResult(
            url=url,
            success=True,
            status_code=response.status_code,
            server=response.headers.get("Server"),
            title=extract_title(body),
            content_type=response.headers.get("Content-Type"),
            body=body,
        )

    def fetch_endpoint(self, url: str) -> Optional[EndpointResult]:
        """
        Request a URL and classify whatever HTTP response arrives.

        Any status code produces a result. When the redirect cap is hit,
        the last redirect response is classified. Connection-level failures
        return None.

        Args:
            url: Full URL to request

        Returns:
            EndpointResult, or None when no HTTP response was received
        """
        try:
            response = self._get(url)
        except requests.exceptions.TooManyRedirects as e:
            response = e.response
            if response is None:
                return None
        except requests.exceptions.RequestException:
            return None

        return analyze_response(
            url=url,
            status_code=response.status_code,
            content_type=response.headers.get("Content-Type"),
            server=response.headers.get("Server"),
            body=self._read_body(response),
            snippet_length=self.snippet_length,
        )

    def close(self) -> None:
        self.session.close()
