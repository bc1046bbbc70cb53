"""
PoE disconnect guard for UniFi networks.

This package provides:
- UniFi controller API client
- Decoding and deduplication of PoE disconnect alarms
- Reconciliation of affected switch ports between a protected and a restrictive port profile
- Monitoring-plugin style result reporting
"""

__version__ = "0.2.0"
