"""
Exchange Module

- structs: venue-agnostic types (segments, endpoints, markets)
- integrations: venue implementations
"""
