"""Service layer: validation, dependency checks, loading, and ServiceResult ops.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
