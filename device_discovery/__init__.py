"""
Device Discovery Module

Discovers devices on local IPv4 subnets with an ICMP sweep, TCP port scan and
HTTP/HTTPS fingerprinting, classifies them and surfaces candidate API endpoints.
"""

__version__ = "1.0.0"
__author__ = "Device Discovery Team"
