"""
HTTP API for the transport order dashboard
"""
