"""Domain layer: descriptors, outcomes, error kinds, and capabilities.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
