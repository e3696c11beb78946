"""
Network utility functions for IPv4 subnets and hosts.

Helpers for mask computation, netmask conversion, host enumeration and
reverse DNS lookups used by the subnet resolver and the host sweeper.
"""

import ipaddress
import re
import socket
from typing import Iterator, List, Optional

CIDR_PATTERN = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})/(\d{1,2})$")


def mask_octets(prefix_length: int) -> List[int]:
    """
    Compute the four netmask octets for a prefix length.

    Coverage is computed per octet so that /0 and /32 never need a shift
    by 32 bits or a negative shift.

    Args:
        prefix_length: CIDR prefix length (0-32)

    Returns:
        List of four mask bytes
    """
    if not 0 <= prefix_length <= 32:
        raise ValueError(f"Prefix length must be between 0 and 32, got {prefix_length}")

    octets = []
    for index in range(4):
        coverage = min(max(prefix_length - 8 * index, 0), 8)
        if coverage == 0:
            octets.append(0x00)
        elif coverage == 8:
            octets.append(0xFF)
        else:
            octets.append((0xFF << (8 - coverage)) & 0xFF)
    return octets


def compute_network_address(ip_address: str, prefix_length: int) -> str:
    """
    Mask an address down to its network address.

    Args:
        ip_address: Interface or host address
        prefix_length: CIDR prefix length (0-32)

    Returns:
        str: Network address (e.g., "192.168.1.0" for 192.168.1.57/24)
    """
    octets = ipaddress.IPv4Address(ip_address).packed
    return ".".join(str(octet & mask) for octet, mask in zip(octets, mask_octets(prefix_length)))


def netmask_to_prefix(netmask: str) -> int:
    """
    Convert a dotted decimal netmask to a prefix length.

    Args:
        netmask: Dotted decimal netmask (e.g., "255.255.255.0")

    Returns:
        int: Prefix length

    Raises:
        ValueError: If the netmask is malformed or not contiguous
    """
    return ipaddress.IPv4Network(f"0.0.0.0/{netmask}").prefixlen


def usable_host_count(prefix_length: int) -> int:
    """
    Number of usable host addresses in a subnet.

    Network and broadcast addresses are excluded; /31 and /32 yield zero.
    """
    return max(2 ** (32 - prefix_length) - 2, 0)


def iter_host_addresses(network_address: str, prefix_length: int) -> Iterator[str]:
    """
    Yield every usable host address of a subnet in ascending order.

    The base address is masked first, so a user-supplied address with host
    bits set still enumerates the hosts of its own subnet.
    """
    if usable_host_count(prefix_length) == 0:
        return
    network = ipaddress.IPv4Network(f"{network_address}/{prefix_length}", strict=False)
    for host in network.hosts():
        yield str(host)


def is_loopback_ip(ip_address: str) -> bool:
    """
    Check if an IP address is a loopback address.

    Args:
        ip_address: IP address to check

    Returns:
        bool: True if IP is loopback, False otherwise
    """
    try:
        return ipaddress.IPv4Address(ip_address).is_loopback
    except ipaddress.AddressValueError:
        return False


def resolve_hostname(ip_address: str) -> Optional[str]:
    """
    Attempt to resolve an IP address to a hostname.

    Args:
        ip_address: IP address to resolve

    Returns:
        Optional[str]: Hostname if resolution successful, None otherwise
    """
    try:
        return socket.gethostbyaddr(ip_address)[0]
    except (socket.herror, socket.gaierror, socket.timeout, OSError):
        return None


def ip_sort_key(ip_address: str) -> tuple:
    """
    Generate sort key for IP address to enable proper sorting.

    Args:
        ip_address: IP address string

    Returns:
        tuple: Sort key for IP address
    """
    try:
        return tuple(ipaddress.IPv4Address(ip_address).packed)
    except ipaddress.AddressValueError:
        return (999, 999, 999, 999)
