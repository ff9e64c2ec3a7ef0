"""
BingX Connector

Unified market catalog and signed request pipeline for the BingX REST API
(spot v1, swap v2, contract v1).
"""

__version__ = "0.1.0"
