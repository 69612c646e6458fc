"""Configuration layer — setting schema, source layers, and the merger.

This layer depends on stdlib, pydantic, pydantic-settings, ruamel.yaml and
structlog. It must never import from services, commands, or output.
"""
