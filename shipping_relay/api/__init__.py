"""
HTTP API of the relay.
"""
