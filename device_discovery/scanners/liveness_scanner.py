"""
ICMP liveness sweep for the Device Discovery Module.

LivenessProber sends a single echo request through the platform ping
binary; HostSweeper fans it out over every usable address of a subnet with
a bounded thread pool and waits for all probes before returning.
"""

import math
import platform
import subprocess
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Set

from .base_scanner import BaseScanner
from ..core.data_models import Subnet
from ..utils.network_utils import iter_host_addresses, usable_host_count

# Subnets above this size are swept, but with a warning
LARGE_SUBNET_HOSTS = 65534


class LivenessProber:
    """
    Single-address reachability probe.

    Any error, timeout or unreachable reply yields False; nothing is raised.
    Hosts that drop ICMP are reported as down.
    """

    WINDOWS_FAILURES = [
        "destination host unreachable",
        "request timed out",
        "could not find host",
        "general failure",
        "transmit failed",
    ]

    UNIX_FAILURES = [
        "destination host unreachable",
        "no route to host",
        "network is unreachable",
        "name or service not known",
    ]

    # stderr wording of iputils and busybox when -W is not a whole number
    REJECTED_WAIT_MARKERS = ["invalid", "bad", "illegal"]

    def __init__(self, system: Optional[str] = None):
        """
        Initialize the prober.

        Args:
            system: Platform name override ("windows", "linux", "darwin")
        """
        self.system = (system or platform.system()).lower()
        # Set once the local ping refuses a fractional -W
        self.whole_seconds = False

    def _linux_wait(self, timeout: float) -> str:
        if self.whole_seconds or float(timeout).is_integer():
            return str(max(math.ceil(timeout), 1))
        return f"{timeout:g}"

    def build_command(self, address: str, timeout: float) -> List[str]:
        """
        Build the ping command for one echo request.

        Args:
            address: Target IPv4 address
            timeout: Seconds to wait for the reply
        """
        if self.system == "windows":
            return ["ping", "-n", "1", "-w", str(max(int(timeout * 1000), 1)), address]
        if self.system == "darwin":
            # BSD ping takes -W in milliseconds
            return ["ping", "-c", "1", "-W", str(max(int(timeout * 1000), 1)), address]
        return ["ping", "-c", "1", "-W", self._linux_wait(timeout), address]

    def _run(self, command: List[str], timeout: float) -> Optional[subprocess.CompletedProcess]:
        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=max(timeout, 1.0) + 1.0,
            )
        except (subprocess.TimeoutExpired, OSError, ValueError):
            return None

    def _wait_rejected(self, command: List[str], result: subprocess.CompletedProcess) -> bool:
        """
        Check whether ping exited on a fractional -W before sending anything.

        A usage error leaves stdout empty; an unanswered echo still prints
        the PING header.
        """
        if self.system in ("windows", "darwin") or self.whole_seconds:
            return False
        if "." not in command[command.index("-W") + 1]:
            return False
        if result.returncode == 0 or (result.stdout or "").strip():
            return False
        stderr = (result.stderr or "").lower()
        return any(marker in stderr for marker in self.REJECTED_WAIT_MARKERS)

    def probe(self, address: str, timeout: float) -> bool:
        """
        Check whether an address answers an ICMP echo in time.

        On Linux the first probe passes a fractional -W; if the local ping
        rejects it, the probe is repeated with whole seconds and every later
        probe uses whole seconds too.

        Args:
            address: Target IPv4 address
            timeout: Seconds to wait for the reply

        Returns:
            bool: True only on a successful, timely reply
        """
        command = self.build_command(address, timeout)
        result = self._run(command, timeout)
        if result is not None and self._wait_rejected(command, result):
            self.whole_seconds = True
            result = self._run(self.build_command(address, timeout), timeout)

        if result is None or result.returncode != 0:
            return False
        return self.analyze_output(result.stdout + result.stderr)

    def analyze_output(self, output: str) -> bool:
        """
        Inspect ping output for a real echo reply.

        Windows ping exits 0 for "destination host unreachable" replies from
        a gateway, so the return code alone is not enough.
        """
        if not output:
            return False

        output_lower = output.lower()
        failures = self.WINDOWS_FAILURES if self.system == "windows" else self.UNIX_FAILURES
        if any(indicator in output_lower for indicator in failures):
            return False
        return "ttl=" in output_lower or "time=" in output_lower or "time<" in output_lower


class HostSweeper(BaseScanner):
    """
    Parallel liveness sweep over a subnet.

    Submission is gated by a semaphore sized to the worker count, so a large
    subnet never queues more than max_workers probes at once. The sweep
    returns only after every probe has finished.
    """

    scanner_type = "liveness"

    def __init__(
        self,
        prober: Optional[LivenessProber] = None,
        timeout: float = 0.5,
        max_workers: int = 50,
        logger=None,
    ):
        """
        Initialize the sweeper.

        Args:
            prober: Object with probe(address, timeout) -> bool
            timeout: Per-probe timeout in seconds
            max_workers: Maximum simultaneous probes
            logger: Logger instance
        """
        super().__init__(logger)
        self.prober = prober or LivenessProber()
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.addresses_probed = 0

    def sweep(self, subnet: Subnet) -> Set[str]:
        """
        Probe every usable address of a subnet.

        Args:
            subnet: Subnet to sweep

        Returns:
            Set[str]: Responsive addresses; empty when nothing answers
        """
        self._start_scan_timer()
        host_count = usable_host_count(subnet.prefix_length)
        self.addresses_probed = 0

        if host_count == 0:
            self._log_warning(f"Subnet {subnet.cidr} has no usable host addresses, skipping sweep")
            self._end_scan_timer()
            return set()

        if host_count > LARGE_SUBNET_HOSTS:
            self._log_warning(
                f"Subnet {subnet.cidr} has {host_count} addresses; the sweep will take a long time"
            )

        self._log_info(
            f"Sweeping {host_count} addresses in {subnet.cidr} "
            f"({self.max_workers} workers, {self.timeout}s timeout)"
        )

        alive: Set[str] = set()
        lock = threading.Lock()
        slots = threading.BoundedSemaphore(self.max_workers)

        def run_probe(address: str) -> None:
            try:
                if self.prober.probe(address, self.timeout):
                    with lock:
                        alive.add(address)
                    self._log_debug(f"Host is up: {address}")
            except Exception as e:
                self._log_debug(f"Probe of {address} failed: {e}")
            finally:
                slots.release()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for address in iter_host_addresses(subnet.network_address, subnet.prefix_length):
                slots.acquire()
                self.addresses_probed += 1
                executor.submit(run_probe, address)

        duration = self._end_scan_timer()
        self._log_info(f"Sweep of {subnet.cidr} finished in {duration:.2f}s: {len(alive)} hosts up")
        return alive
