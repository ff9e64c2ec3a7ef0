"""
Networking Infrastructure

- http: REST transport manager and exception handler strategies
"""
