"""Dependency injection — registry, constructor selection, resolver, container.

Types are registered explicitly (or auto-registered when a marked type is
first needed as a dependency) and built lazily on ``Container.get()``.
"""
