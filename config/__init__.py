"""
Configuration for the transport order dashboard
"""
