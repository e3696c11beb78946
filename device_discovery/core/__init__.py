"""
Core components for device discovery functionality.
"""

from .data_models import (
    DeviceType,
    ScanStatus,
    Subnet,
    EndpointResult,
    ServiceProbeResult,
    Classification,
    HostRecord,
    ScanStatistics,
    ScanResult
)
from .device_classifier import DeviceClassifier, ClassificationRule

__all__ = [
    'DeviceType',
    'ScanStatus',
    'Subnet',
    'EndpointResult',
    'ServiceProbeResult',
    'Classification',
    'HostRecord',
    'ScanStatistics',
    'ScanResult',
    'DeviceClassifier',
    'ClassificationRule'
]
