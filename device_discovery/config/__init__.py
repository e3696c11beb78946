"""
Configuration module for Device Discovery.
Provides configuration loading and validation for all scan phases.
"""

from .config_loader import ConfigLoader, ScanConfig, LivenessConfig, PortScanConfig, HTTPConfig

__all__ = ['ConfigLoader', 'ScanConfig', 'LivenessConfig', 'PortScanConfig', 'HTTPConfig']
