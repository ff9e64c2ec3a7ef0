"""
Infrastructure Components

Foundational services shared by exchange integrations:
- networking: HTTP transport and error classification
- logging: structured logging with pluggable backends
- exceptions: exchange and system exception hierarchy
- decorators: retry helpers
"""
