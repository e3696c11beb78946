"""
TCP connect port scanning for the Device Discovery Module.
"""

import socket
from typing import List, Optional

from .base_scanner import BaseScanner
from ..config.config_loader import DEFAULT_CANDIDATE_PORTS


class PortProber:
    """Single-port TCP connect test."""

    def is_open(self, address: str, port: int, timeout: float) -> bool:
        """
        Attempt a TCP connection.

        Refused, timed out and errored connections all yield False.

        Args:
            address: Target IPv4 address
            port: TCP port
            timeout: Connect timeout in seconds
        """
        try:
            with socket.create_connection((address, port), timeout=timeout):
                return True
        except (OSError, ValueError):
            return False


class PortScanner(BaseScanner):
    """
    Sequential scan of a fixed candidate port list for one host.

    Worst case per host is len(ports) * timeout; host-level parallelism
    lives one layer up.
    """

    scanner_type = "port_scan"

    def __init__(
        self,
        ports: Optional[List[int]] = None,
        timeout: float = 0.5,
        prober: Optional[PortProber] = None,
        logger=None,
    ):
        super().__init__(logger)
        self.ports = list(ports) if ports else list(DEFAULT_CANDIDATE_PORTS)
        self.timeout = timeout
        self.prober = prober or PortProber()

    def scan(self, address: str) -> List[int]:
        """
        Scan the candidate ports of one host.

        Args:
            address: Target IPv4 address

        Returns:
            List[int]: Open ports, in candidate order
        """
        self._start_scan_timer()
        open_ports = [
            port for port in self.ports
            if self.prober.is_open(address, port, self.timeout)
        ]
        duration = self._end_scan_timer()

        if open_ports:
            self._log_info(f"{address}: open ports {', '.join(str(p) for p in open_ports)} ({duration:.1f}s)")
        else:
            self._log_debug(f"{address}: no open candidate ports ({duration:.1f}s)")
        return open_ports
