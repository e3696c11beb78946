"""
Subnet resolution for the Device Discovery Module.

Turns user-supplied CIDR strings, or the host's own IPv4 interfaces when no
list is given, into Subnet records ready for the liveness sweep.
"""

import socket
from typing import List, Optional

import psutil

from .data_models import Subnet
from ..utils.logger import logger
from ..utils.error_handler import (
    ErrorHandler, ErrorContext, ErrorType, ErrorSeverity, ValidationError
)
from ..utils.network_utils import (
    CIDR_PATTERN,
    compute_network_address,
    is_loopback_ip,
    netmask_to_prefix,
)


def parse_cidr(text: str) -> Optional[Subnet]:
    """
    Parse and range-check an A.B.C.D/P string.

    The address is kept exactly as given; only octet (0-255) and prefix
    (0-32) ranges are checked.

    Args:
        text: CIDR string supplied by the user

    Returns:
        Subnet, or None if the string is malformed or out of range
    """
    if not isinstance(text, str):
        return None

    match = CIDR_PATTERN.match(text.strip())
    if not match:
        return None

    octets = [int(group) for group in match.groups()[:4]]
    prefix_length = int(match.group(5))
    if any(octet > 255 for octet in octets) or prefix_length > 32:
        return None

    address = ".".join(str(octet) for octet in octets)
    return Subnet(network_address=address, prefix_length=prefix_length, label=text.strip())


class SubnetResolver:
    """
    Resolves the list of subnets to scan.

    User input is validated entry by entry; invalid entries are reported
    and dropped. Without user input, every non-loopback IPv4 interface
    contributes its masked network.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None):
        """Initialize the SubnetResolver."""
        self.logger = logger
        self.error_handler = error_handler or ErrorHandler(self.logger)

    def resolve(self, cidrs: Optional[List[str]] = None) -> List[Subnet]:
        """
        Resolve subnets from user input or local interfaces.

        Args:
            cidrs: CIDR strings; None or empty means auto-discovery

        Returns:
            List[Subnet]: Subnets in the order supplied or discovered
        """
        if cidrs:
            return self.from_cidrs(cidrs)
        return self.from_interfaces()

    def from_cidrs(self, cidrs: List[str]) -> List[Subnet]:
        """Parse user-supplied CIDR strings, skipping invalid ones with a warning."""
        subnets = []
        for text in cidrs:
            subnet = parse_cidr(text)
            if subnet is None:
                context = ErrorContext(
                    error_type=ErrorType.VALIDATION_ERROR,
                    severity=ErrorSeverity.LOW,
                    operation="from_cidrs",
                    component="SubnetResolver",
                    additional_info={"subnet": text},
                )
                self.error_handler.handle_error(
                    ValidationError(f"Invalid subnet format, skipping: {text}", context), context
                )
                continue
            subnets.append(subnet)
        return subnets

    def from_interfaces(self) -> List[Subnet]:
        """
        Derive subnets from the host's IPv4 interfaces.

        Loopback addresses and networks that mask to 0.0.0.0 are skipped.
        When two interfaces share a network, the first one seen wins.

        Returns:
            List[Subnet]: Masked networks of local interfaces
        """
        subnets: List[Subnet] = []
        seen = set()

        try:
            interfaces = psutil.net_if_addrs()
        except OSError as e:
            self.logger.error(f"Failed to enumerate network interfaces: {e}")
            return subnets

        for interface_name, addresses in interfaces.items():
            for address in addresses:
                if address.family != socket.AF_INET or not address.address:
                    continue

                ip = address.address
                if is_loopback_ip(ip):
                    self.logger.debug(f"Skipping loopback address {ip} on {interface_name}")
                    continue
                if not address.netmask:
                    self.logger.debug(f"No netmask for {ip} on {interface_name}, skipping")
                    continue

                try:
                    prefix_length = netmask_to_prefix(address.netmask)
                    network_address = compute_network_address(ip, prefix_length)
                except ValueError as e:
                    self.logger.debug(f"Unusable address {ip}/{address.netmask} on {interface_name}: {e}")
                    continue

                if network_address == "0.0.0.0":
                    self.logger.debug(f"Skipping degenerate network for {ip} on {interface_name}")
                    continue

                key = (network_address, prefix_length)
                if key in seen:
                    continue
                seen.add(key)

                self.logger.info(
                    f"Interface {interface_name}: {ip} -> {network_address}/{prefix_length}"
                )
                subnets.append(Subnet(
                    network_address=network_address,
                    prefix_length=prefix_length,
                    label=interface_name,
                ))

        return subnets
