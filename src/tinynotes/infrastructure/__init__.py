"""Infrastructure layer — filesystem confinement, registry, user store.

This layer depends on stdlib and the domain layer.
It must never import from services, commands, or output.
"""
