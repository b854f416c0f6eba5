"""
Order services: payload normalization, workflow, storage and use cases
"""
